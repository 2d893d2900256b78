from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from synapse.config.settings import ExtractionConfig
from synapse.extraction.envelope import decode_bare, decode_envelope, envelope_graph
from synapse.extraction.sanitizer import sanitize_json_string
from synapse.graph.graph_schema import ExtractedResponse, GraphResult
from synapse.utils.text import content_key
from synapse.utils.time import epoch_millis

logger = logging.getLogger("synapse.extraction")

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _strict_loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def locate_json_candidate(response: str) -> Optional[str]:
    """
    Finds the substring of a completion most likely to hold the JSON payload.

    The first fenced code block wins. Otherwise the span from the first
    ``{`` to the last ``}`` is used, even when prose around the payload
    contains braces of its own. Returns ``None`` when neither applies.
    """
    match = _FENCED_BLOCK.search(response)
    if match and match.group(1):
        return match.group(1).strip()

    first = response.find("{")
    last = response.rfind("}")
    if first != -1 and last > first:
        return response[first : last + 1].strip()

    return None


class GraphExtractor:
    """
    Recovers graph data from a free-form model completion.

    Failures never propagate: every path that cannot produce a graph logs
    its diagnostics and returns an empty result, so callers always get a
    well-formed object. A first parse failure triggers one retry on the
    sanitized candidate.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        *,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.clock = clock

    # -------------------- Public API --------------------

    def extract_graph_data(self, response: str) -> GraphResult:
        """
        Top-level ``{"entities": [...], "relationships": [...]}`` contract.
        """
        result = self._extract(response, self._decode_bare)
        return result.graph if result is not None else GraphResult.empty()

    def extract_response(self, response: str) -> ExtractedResponse:
        """
        Like ``extract_graph_data`` but accepts the ``graph`` and
        ``graphData`` envelopes and carries the answer text along.
        """
        result = self._extract(response, self._decode_envelope)
        return result if result is not None else ExtractedResponse.empty()

    # -------------------- Pipeline --------------------

    def _extract(
        self,
        response: str,
        decode: Callable[[Any], ExtractedResponse],
    ) -> ExtractedResponse | None:
        candidate = locate_json_candidate(response)
        if candidate is None:
            logger.error(
                "Could not find any JSON-like structure in the AI response. response=%r",
                response,
            )
            return None

        try:
            return decode(_strict_loads(candidate))
        except (ValueError, TypeError, RecursionError) as exc:
            logger.error(
                "Failed to parse JSON from AI response. attempted=%r response=%r error=%r",
                candidate,
                response,
                exc,
            )

        logger.info("Attempting to parse sanitized JSON")
        sanitized = sanitize_json_string(candidate)
        try:
            return decode(_strict_loads(sanitized))
        except (ValueError, TypeError, RecursionError) as exc:
            logger.error(
                "Failed to parse even after sanitization. attempted=%r response=%r error=%r",
                candidate,
                response,
                exc,
            )
            return None

    def _decode_bare(self, data: Any) -> ExtractedResponse:
        payload = decode_bare(data)
        return ExtractedResponse(
            answer="",
            graph=self._to_graph(payload.entities, payload.relationships),
        )

    def _decode_envelope(self, data: Any) -> ExtractedResponse:
        envelope = decode_envelope(data)
        payload = envelope_graph(envelope)
        return ExtractedResponse(
            answer=envelope.answer or "",
            graph=self._to_graph(payload.entities, payload.relationships),
        )

    # -------------------- Edge ids --------------------

    def _to_graph(
        self,
        entities: List[Dict[str, Any]],
        relationships: List[Dict[str, Any]],
    ) -> GraphResult:
        stamp = self.clock()
        edges = [
            {**edge, "id": self._edge_id(edge, index, stamp)}
            for index, edge in enumerate(relationships)
        ]
        return GraphResult(nodes=list(entities), edges=edges)

    def _edge_id(self, edge: Dict[str, Any], index: int, stamp: int) -> str:
        if self.config.edge_id_strategy == "content":
            return "edge_" + content_key(
                edge.get("source", ""), edge.get("target", ""), edge.get("label", ""), index
            )
        return f"edge_{stamp}_{index}"


_default_extractor = GraphExtractor()


def extract_graph_data(response: str) -> GraphResult:
    return _default_extractor.extract_graph_data(response)


def extract_response(response: str) -> ExtractedResponse:
    return _default_extractor.extract_response(response)
