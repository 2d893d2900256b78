"""
Graph subsystem for synapse.

Defines the graph data contracts produced by extraction and the
read-only analytics and export used on stored graphs.
"""

from synapse.graph.graph_schema import (
    DiagramType,
    Edge,
    EntityType,
    ExtractedResponse,
    GraphResult,
    Node,
    Sentiment,
)
from synapse.graph.graph_store import GraphStore
from synapse.graph.graph_export import graph_to_csv

__all__ = [
    "DiagramType",
    "Edge",
    "EntityType",
    "ExtractedResponse",
    "GraphResult",
    "Node",
    "Sentiment",
    "GraphStore",
    "graph_to_csv",
]
