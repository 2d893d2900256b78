from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List

import networkx as nx

from synapse.graph.graph_schema import Node, Edge


class GraphStore:
    """
    In-memory view over one generated graph.

    Used for read-only analytics on stored history items. Node ids are
    not guaranteed unique by the model; duplicates and edges pointing at
    unknown ids are recorded in ``metadata`` instead of being rejected.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self.metadata: Dict[str, Any] = {
            "duplicate_node_ids": [],
            "dangling_edges": [],
        }

    @staticmethod
    def from_graph_data(graph_data: Dict[str, Any]) -> "GraphStore":
        store = GraphStore()
        for raw in graph_data.get("nodes") or []:
            store.add_node(Node.from_dict(raw))
        for raw in graph_data.get("edges") or []:
            store.add_edge(Edge.from_dict(raw))
        return store

    # -------------------- Nodes --------------------

    def add_node(self, node: Node) -> None:
        if node.id in self._graph:
            self.metadata["duplicate_node_ids"].append(node.id)
            return
        self._graph.add_node(node.id, data=node)

    def get_node(self, node_id: str) -> Node:
        return self._graph.nodes[node_id]["data"]

    def get_nodes(self) -> List[Node]:
        return [data["data"] for _, data in self._graph.nodes(data=True)]

    # -------------------- Edges --------------------

    def add_edge(self, edge: Edge) -> None:
        if edge.source not in self._graph or edge.target not in self._graph:
            self.metadata["dangling_edges"].append(edge.id)
            return
        self._graph.add_edge(edge.source, edge.target, key=edge.id, data=edge)

    def edges(self) -> Iterable[Edge]:
        for _, _, data in self._graph.edges(data=True):
            yield data["data"]

    def get_edges(self) -> List[Edge]:
        return list(self.edges())

    def neighbors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.successors(node_id))

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def component_count(self) -> int:
        if self.node_count() == 0:
            return 0
        return nx.number_weakly_connected_components(self._graph)

    def isolated_nodes(self) -> List[str]:
        return sorted(nx.isolates(self._graph))

    def stats(self) -> Dict[str, Any]:
        nodes = self.get_nodes()
        edges = self.get_edges()
        return {
            "components": self.component_count(),
            "isolated_nodes": self.isolated_nodes(),
            "node_types": dict(Counter(n.type for n in nodes)),
            "node_sentiments": dict(Counter(n.sentiment for n in nodes)),
            "edge_sentiments": dict(Counter(e.sentiment for e in edges)),
            "duplicate_node_ids": list(self.metadata["duplicate_node_ids"]),
            "dangling_edges": list(self.metadata["dangling_edges"]),
        }
