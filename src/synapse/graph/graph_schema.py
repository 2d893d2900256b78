from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class EntityType(str, Enum):
    PERSON = "PERSON"
    ORG = "ORG"
    LOCATION = "LOCATION"
    DATE = "DATE"
    EVENT = "EVENT"
    PRODUCT = "PRODUCT"
    CONCEPT = "CONCEPT"
    JOB_TITLE = "JOB_TITLE"
    FIELD_OF_STUDY = "FIELD_OF_STUDY"
    THEORY = "THEORY"
    ART_WORK = "ART_WORK"
    # mind maps
    TOPIC = "TOPIC"
    SUBTOPIC = "SUBTOPIC"
    # flowcharts
    START_END = "START_END"
    PROCESS = "PROCESS"
    DECISION = "DECISION"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class DiagramType(str, Enum):
    KNOWLEDGE_GRAPH = "knowledge-graph"
    MINDMAP = "mindmap"
    FLOWCHART = "flowchart"

    @classmethod
    def parse(cls, value: str | None) -> "DiagramType":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.KNOWLEDGE_GRAPH


KNOWLEDGE_GRAPH_ENTITY_TYPES: tuple[EntityType, ...] = (
    EntityType.PERSON,
    EntityType.ORG,
    EntityType.LOCATION,
    EntityType.DATE,
    EntityType.EVENT,
    EntityType.PRODUCT,
    EntityType.CONCEPT,
    EntityType.JOB_TITLE,
    EntityType.FIELD_OF_STUDY,
    EntityType.THEORY,
    EntityType.ART_WORK,
)

MINDMAP_ENTITY_TYPES: tuple[EntityType, ...] = (
    EntityType.TOPIC,
    EntityType.SUBTOPIC,
    EntityType.CONCEPT,
)

FLOWCHART_ENTITY_TYPES: tuple[EntityType, ...] = (
    EntityType.START_END,
    EntityType.PROCESS,
    EntityType.DECISION,
)

ENTITY_TYPES_BY_DIAGRAM: Dict[DiagramType, tuple[EntityType, ...]] = {
    DiagramType.KNOWLEDGE_GRAPH: KNOWLEDGE_GRAPH_ENTITY_TYPES,
    DiagramType.MINDMAP: MINDMAP_ENTITY_TYPES,
    DiagramType.FLOWCHART: FLOWCHART_ENTITY_TYPES,
}


@dataclass(frozen=True)
class GraphResult:
    """
    Validated output of extraction.

    ``nodes`` are the model's entities as given; ``edges`` are its
    relationships with a synthesized ``id``. Both lists are always
    present, possibly empty.
    """

    nodes: List[Dict[str, Any]] = field(default_factory=list)
    edges: List[Dict[str, Any]] = field(default_factory=list)

    @staticmethod
    def empty() -> "GraphResult":
        return GraphResult(nodes=[], edges=[])

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": list(self.nodes),
            "edges": list(self.edges),
        }


@dataclass(frozen=True)
class ExtractedResponse:
    """
    Answer text (question mode) plus the graph recovered from one completion.
    """

    answer: str
    graph: GraphResult

    @staticmethod
    def empty() -> "ExtractedResponse":
        return ExtractedResponse(answer="", graph=GraphResult.empty())


@dataclass(frozen=True)
class Node:
    """
    Typed view of a stored entity.
    """

    id: str
    label: str
    type: str
    sentiment: str
    attributes: Dict[str, Any]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Node":
        known = {"id", "label", "type", "sentiment"}
        return Node(
            id=str(data.get("id", "")),
            label=str(data.get("label", "")),
            type=str(data.get("type", "")),
            sentiment=str(data.get("sentiment", "")),
            attributes={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class Edge:
    """
    Typed view of a stored relationship.
    """

    id: str
    source: str
    target: str
    label: str
    sentiment: str
    attributes: Dict[str, Any]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Edge":
        known = {"id", "source", "target", "label", "sentiment"}
        return Edge(
            id=str(data.get("id", "")),
            source=str(data.get("source", "")),
            target=str(data.get("target", "")),
            label=str(data.get("label", "")),
            sentiment=str(data.get("sentiment", "")),
            attributes={k: v for k, v in data.items() if k not in known},
        )
