from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter

import networkx as nx
from networkx.algorithms import isomorphism

from gref.errors import MatchFailure, MatcherNotReady
from gref.graph.graph_pattern import GraphPattern
from gref.graph.graph_schema import WILDCARD


class GraphMatcher(ABC):
    """
    Pattern-vs-graph comparison capability.

    Matchers are stateless once initialized. `initialize` must be called
    exactly once by the owner before the matcher is handed to an
    algorithm; it replaces any implicit global warm-up.
    """

    name: str = "abstract"
    max_score: float = 1.0

    def __init__(self) -> None:
        self._ready = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def ready(self) -> bool:
        return self._ready

    def initialize(self) -> "GraphMatcher":
        if not self._ready:
            self._prepare()
            self._ready = True
        return self

    def _prepare(self) -> None:
        """
        One-time setup hook for subclasses.
        """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embeds(self, pattern: GraphPattern, target: GraphPattern) -> bool:
        """
        True iff `pattern` embeds into `target`.

        Raises MatchFailure when the comparison cannot be computed.
        """
        if not self._ready:
            raise MatcherNotReady(f"matcher {self.name!r} was not initialized")
        if pattern.directed != target.directed:
            raise MatchFailure("pattern and target disagree on directedness")
        return self._embeds(pattern, target)

    def score(self, pattern: GraphPattern, target: GraphPattern) -> float:
        """
        Support contribution of `target` to `pattern`, in [0, max_score].
        """
        return self.max_score if self.embeds(pattern, target) else 0.0

    # ------------------------------------------------------------------
    # Implementation contract
    # ------------------------------------------------------------------

    @abstractmethod
    def _embeds(self, pattern: GraphPattern, target: GraphPattern) -> bool:
        raise NotImplementedError


class SubgraphMatcher(GraphMatcher):
    """
    Non-induced subgraph embedding (monomorphism) via networkx VF2.

    A wildcard label on a pattern vertex or edge matches any label.
    Monomorphism keeps the generalization contract sound: dropping an
    edge or relaxing a label can only add embeddings.
    """

    name = "subgraph"

    def __init__(self, *, wildcard: str = WILDCARD, label_prefilter: bool = True) -> None:
        super().__init__()
        self.wildcard = wildcard
        self.label_prefilter = label_prefilter

    def _prepare(self) -> None:
        wildcard = self.wildcard

        # VF2 passes (target attrs, pattern attrs): G1 is the target.
        def _label_match(target_attrs: dict, pattern_attrs: dict) -> bool:
            label = pattern_attrs.get("label")
            return label == wildcard or label == target_attrs.get("label")

        self._node_match = _label_match
        self._edge_match = _label_match

    def _embeds(self, pattern: GraphPattern, target: GraphPattern) -> bool:
        if pattern.node_count() > target.node_count():
            return False
        if pattern.edge_count() > target.edge_count():
            return False

        if self.label_prefilter:
            if not _covers(target.label_counts(), pattern.label_counts()):
                return False
            if not _covers(target.edge_label_counts(), pattern.edge_label_counts()):
                return False

        matcher_cls = (
            isomorphism.DiGraphMatcher if pattern.directed else isomorphism.GraphMatcher
        )
        vf2 = matcher_cls(
            target.graph,
            pattern.graph,
            node_match=self._node_match,
            edge_match=self._edge_match,
        )
        try:
            return vf2.subgraph_is_monomorphic()
        except (nx.NetworkXError, KeyError, TypeError) as exc:
            raise MatchFailure(f"subgraph match failed: {exc}") from exc


def _covers(available: Counter, required: Counter) -> bool:
    return all(available.get(label, 0) >= count for label, count in required.items())


MATCHERS = {
    SubgraphMatcher.name: SubgraphMatcher,
}


def build_matcher(name: str, **kwargs) -> GraphMatcher:
    try:
        matcher_cls = MATCHERS[name]
    except KeyError as exc:
        raise ValueError(f"unknown matcher {name!r}") from exc
    return matcher_cls(**kwargs)
