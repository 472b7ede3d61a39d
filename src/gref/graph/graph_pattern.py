from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from gref.graph.graph_schema import PatternNode, PatternEdge, WILDCARD


class GraphPattern:
    """
    Immutable labeled graph used both as query pattern and database graph.

    Vertices are the integers 0..n-1, each carrying a `label` attribute;
    edges carry a `label` attribute as well. The backing networkx graph is
    frozen: every transformation returns a new pattern.
    """

    def __init__(self, graph: nx.Graph, *, name: Optional[str] = None) -> None:
        for _, label in graph.nodes(data="label"):
            _check_label(label)
        for _, _, label in graph.edges(data="label"):
            _check_label(label)
        self._graph = nx.freeze(graph)
        self.name = name
        self._label_counts: Optional[Counter] = None
        self._edge_label_counts: Optional[Counter] = None

    # -------------------- Construction --------------------

    @staticmethod
    def create(
        labels: Sequence[str],
        edges: Iterable[Tuple[int, int, str]] = (),
        *,
        directed: bool = False,
        name: Optional[str] = None,
    ) -> "GraphPattern":
        graph = nx.DiGraph() if directed else nx.Graph()
        for i, label in enumerate(labels):
            graph.add_node(i, label=str(label))

        for a, b, label in edges:
            if a not in graph or b not in graph:
                raise ValueError(f"edge ({a}, {b}) references an unknown node")
            graph.add_edge(a, b, label=str(label))

        return GraphPattern(graph, name=name)

    @staticmethod
    def from_networkx(graph: nx.Graph, *, name: Optional[str] = None) -> "GraphPattern":
        """
        Copy an arbitrary networkx graph, renumbering vertices in sorted order.

        Missing `label` attributes default to the wildcard.
        """
        copy = nx.convert_node_labels_to_integers(graph, ordering="sorted")
        for _, data in copy.nodes(data=True):
            data["label"] = str(data.get("label", WILDCARD))
        for _, _, data in copy.edges(data=True):
            data["label"] = str(data.get("label", WILDCARD))
        return GraphPattern(copy, name=name)

    # -------------------- Accessors --------------------

    @property
    def graph(self) -> nx.Graph:
        """
        Frozen networkx view; mutation attempts raise NetworkXError.
        """
        return self._graph

    @property
    def directed(self) -> bool:
        return self._graph.is_directed()

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def node_label(self, node_id: int) -> str:
        return self._graph.nodes[node_id]["label"]

    def edge_label(self, source: int, target: int) -> str:
        return self._graph.edges[source, target]["label"]

    def degree(self, node_id: int) -> int:
        return self._graph.degree(node_id)

    def nodes(self) -> List[PatternNode]:
        return [
            PatternNode(id=n, label=self._graph.nodes[n]["label"])
            for n in sorted(self._graph.nodes)
        ]

    def edges(self) -> List[PatternEdge]:
        edges: List[PatternEdge] = []
        for u, v, label in self._graph.edges(data="label"):
            if not self.directed and v < u:
                u, v = v, u
            edges.append(PatternEdge(source=u, target=v, label=label))
        return sorted(edges, key=lambda e: (e.source, e.target))

    def label_counts(self) -> Counter:
        """
        Multiset of concrete node labels (wildcards excluded).
        """
        if self._label_counts is None:
            self._label_counts = Counter(
                n.label for n in self.nodes() if n.label != WILDCARD
            )
        return self._label_counts

    def edge_label_counts(self) -> Counter:
        if self._edge_label_counts is None:
            self._edge_label_counts = Counter(
                e.label for e in self.edges() if e.label != WILDCARD
            )
        return self._edge_label_counts

    def to_networkx(self) -> nx.Graph:
        """
        Mutable copy of the backing graph.
        """
        return self._graph.copy()

    # -------------------- Transformations --------------------

    def without_edge(self, source: int, target: int) -> "GraphPattern":
        g = self.to_networkx()
        g.remove_edge(source, target)
        return GraphPattern(g)

    def without_node(self, node_id: int) -> "GraphPattern":
        g = self.to_networkx()
        g.remove_node(node_id)
        return GraphPattern(nx.convert_node_labels_to_integers(g, ordering="sorted"))

    def without_isolated(self) -> "GraphPattern":
        g = self.to_networkx()
        g.remove_nodes_from(list(nx.isolates(g)))
        return GraphPattern(nx.convert_node_labels_to_integers(g, ordering="sorted"))

    def relabel_node(self, node_id: int, label: str) -> "GraphPattern":
        g = self.to_networkx()
        g.nodes[node_id]["label"] = label
        return GraphPattern(g)

    def relabel_edge(self, source: int, target: int, label: str) -> "GraphPattern":
        g = self.to_networkx()
        g.edges[source, target]["label"] = label
        return GraphPattern(g)

    # -------------------- Misc --------------------

    def __repr__(self) -> str:
        labels = [n.label for n in self.nodes()]
        edges = [(e.source, e.target, e.label) for e in self.edges()]
        return f"GraphPattern(nodes={labels}, edges={edges})"


def _check_label(label) -> None:
    # Labels are written as whitespace-separated text fields.
    if not isinstance(label, str) or not label or " ".join(label.split()) != label:
        raise ValueError(f"invalid label {label!r}: expected non-empty single-spaced text")
