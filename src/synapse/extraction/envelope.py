from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)


class GraphPayload(BaseModel):
    """
    The entities/relationships object the model is asked to emit.
    """

    model_config = ConfigDict(extra="allow")

    entities: List[Dict[str, Any]] = Field(default_factory=list)
    relationships: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("entities", "relationships", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class GraphDataPayload(GraphPayload):
    """
    Same payload under the names the client uses (``nodes``/``edges``).
    """

    entities: List[Dict[str, Any]] = Field(
        default_factory=list,
        validation_alias=AliasChoices("entities", "nodes"),
    )
    relationships: List[Dict[str, Any]] = Field(
        default_factory=list,
        validation_alias=AliasChoices("relationships", "edges"),
    )


class _AnswerText(BaseModel):
    answer: Optional[str] = None

    @field_validator("answer", mode="before")
    @classmethod
    def _answer_as_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)


class GraphEnvelope(_AnswerText):
    """``{"answer"?: str, "graph": {...}}``"""

    model_config = ConfigDict(extra="allow")

    graph: GraphPayload


class GraphDataEnvelope(_AnswerText):
    """``{"answer"?: str, "graphData": {...}}``"""

    model_config = ConfigDict(extra="allow")

    graph_data: GraphDataPayload = Field(alias="graphData")


class BareEnvelope(GraphPayload, _AnswerText):
    """``{"entities": [...], "relationships": [...]}`` at the top level."""

    @property
    def graph(self) -> GraphPayload:
        return self


def _envelope_tag(value: Any) -> str:
    if isinstance(value, dict):
        if "graph" in value:
            return "graph"
        if "graphData" in value:
            return "graphData"
        return "bare"
    if isinstance(value, GraphEnvelope):
        return "graph"
    if isinstance(value, GraphDataEnvelope):
        return "graphData"
    return "bare"


ResponseEnvelope = Annotated[
    Union[
        Annotated[GraphEnvelope, Tag("graph")],
        Annotated[GraphDataEnvelope, Tag("graphData")],
        Annotated[BareEnvelope, Tag("bare")],
    ],
    Discriminator(_envelope_tag),
]

_ENVELOPE = TypeAdapter(ResponseEnvelope)
_BARE = TypeAdapter(GraphPayload)


def decode_envelope(value: Any) -> Union[GraphEnvelope, GraphDataEnvelope, BareEnvelope]:
    """
    Validates a parsed completion against the known response shapes.

    Raises ``pydantic.ValidationError`` (a ``ValueError``) when the value
    is not an object or its graph arrays are malformed.
    """
    return _ENVELOPE.validate_python(value)


def decode_bare(value: Any) -> GraphPayload:
    """
    Validates a parsed completion as a top-level entities/relationships object.
    """
    return _BARE.validate_python(value)


def envelope_graph(envelope: Union[GraphEnvelope, GraphDataEnvelope, BareEnvelope]) -> GraphPayload:
    if isinstance(envelope, GraphDataEnvelope):
        return envelope.graph_data
    return envelope.graph
