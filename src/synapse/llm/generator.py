from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from synapse.extraction.extractor import GraphExtractor
from synapse.graph.graph_schema import DiagramType, ExtractedResponse
from synapse.llm.prompts import build_prompt

logger = logging.getLogger("synapse.generation")


@dataclass(frozen=True)
class MediaPart:
    """
    Binary attachment forwarded to a multimodal model.
    """

    data: bytes
    mime_type: str
    filename: str = ""


@dataclass(frozen=True)
class GenerationRequest:
    text: str = ""
    question: str = ""
    diagram_type: DiagramType = DiagramType.KNOWLEDGE_GRAPH
    image: Optional[MediaPart] = None
    audio: Optional[MediaPart] = None
    image_url: str = ""
    audio_url: str = ""
    document_context: Optional[str] = None

    @property
    def is_question(self) -> bool:
        return bool(self.question.strip())

    @property
    def attachments(self) -> list[MediaPart]:
        return [part for part in (self.image, self.audio) if part is not None]

    def has_input(self) -> bool:
        return any(
            (
                self.text.strip(),
                self.question.strip(),
                self.image is not None,
                self.audio is not None,
                self.image_url.strip(),
                self.audio_url.strip(),
                self.document_context,
            )
        )


class GenerationBackend(Protocol):
    """
    Mandatory text generation backend.

    Any implementation MUST:
    - accept a prompt string and optional binary attachments
    - return the raw text completion
    - raise ``GenerationError`` when the model call itself fails
    """

    def generate(self, prompt: str, attachments: Sequence[MediaPart] = ()) -> str: ...


PromptBuilder = Callable[[GenerationRequest], str]


class GraphGenerator:
    """
    LLM-backed graph generator.

    Builds the prompt, calls the backend once and hands the completion to
    the extractor. An empty graph in the result means the completion held
    no usable graph; transport failures surface as ``GenerationError``.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        prompt_builder: PromptBuilder | None = None,
        extractor: GraphExtractor | None = None,
    ) -> None:
        if backend is None:
            raise ValueError("LLM backend must be provided")

        self.backend = backend
        self.prompt_builder = prompt_builder or build_prompt
        self.extractor = extractor or GraphExtractor()

    def generate(self, request: GenerationRequest) -> ExtractedResponse:
        if not request.has_input():
            raise ValueError("At least one input is required.")

        prompt = self.prompt_builder(request)

        t0 = time.perf_counter()
        completion = self.backend.generate(prompt, request.attachments)
        logger.info(
            "[generation] %s completion in %.3fs (%d chars)",
            request.diagram_type.value,
            time.perf_counter() - t0,
            len(completion),
        )

        result = self.extractor.extract_response(completion)
        logger.info(
            "[generation] extracted nodes=%d edges=%d answer=%s",
            len(result.graph.nodes),
            len(result.graph.edges),
            bool(result.answer),
        )
        return result
