from __future__ import annotations

from abc import ABC, abstractmethod

import networkx as nx
from networkx.algorithms import isomorphism

from gref.graph.graph_pattern import GraphPattern


class PatternEquivalence(ABC):
    """
    Structural equality between patterns.

    The lattice treats this as an opaque equivalence relation: `key`
    narrows candidates to a bucket, `equal` decides. Equal patterns MUST
    share a key.
    """

    @abstractmethod
    def key(self, pattern: GraphPattern) -> str:
        raise NotImplementedError

    @abstractmethod
    def equal(self, a: GraphPattern, b: GraphPattern) -> bool:
        raise NotImplementedError


class IsomorphismEquivalence(PatternEquivalence):
    """
    Label-preserving graph isomorphism.

    Buckets by a Weisfeiler-Lehman hash over node and edge labels, which
    is independent of vertex numbering and label ordering.
    """

    def __init__(self, iterations: int = 3) -> None:
        self.iterations = iterations
        self._node_match = isomorphism.categorical_node_match("label", None)
        self._edge_match = isomorphism.categorical_edge_match("label", None)

    def key(self, pattern: GraphPattern) -> str:
        wl = nx.weisfeiler_lehman_graph_hash(
            pattern.graph,
            node_attr="label",
            edge_attr="label",
            iterations=self.iterations,
        )
        kind = "d" if pattern.directed else "u"
        return f"{kind}:{pattern.node_count()}:{pattern.edge_count()}:{wl}"

    def equal(self, a: GraphPattern, b: GraphPattern) -> bool:
        if a.directed != b.directed:
            return False
        if a.node_count() != b.node_count() or a.edge_count() != b.edge_count():
            return False
        if a.label_counts() != b.label_counts():
            return False
        return nx.is_isomorphic(
            a.graph,
            b.graph,
            node_match=self._node_match,
            edge_match=self._edge_match,
        )
