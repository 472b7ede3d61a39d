from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, Set

from gref.graph.graph_pattern import GraphPattern


@dataclass(frozen=True)
class NodeScore:
    """
    Aggregate support of a pattern against the database.

    - value: aggregated score
    - matched: indices of database graphs with a positive contribution
    - saturated: every database graph contributed the matcher's maximum
    """

    value: float
    matched: FrozenSet[int] = frozenset()
    saturated: bool = False


@dataclass(eq=False)
class ReformulationNode:
    """
    One candidate reformulation inside the lattice.

    `id` doubles as discovery order. `parents` only grows; the score is
    computed at most once and never changes afterwards.
    """

    id: int
    pattern: GraphPattern
    generation: int
    parents: Set[int] = field(default_factory=set)
    _score: Optional[NodeScore] = field(default=None, repr=False)

    @property
    def scored(self) -> bool:
        return self._score is not None

    @property
    def score(self) -> float:
        if self._score is None:
            raise ValueError(f"node {self.id} has not been scored")
        return self._score.value

    @property
    def matched(self) -> FrozenSet[int]:
        if self._score is None:
            raise ValueError(f"node {self.id} has not been scored")
        return self._score.matched

    @property
    def saturated(self) -> bool:
        return self._score is not None and self._score.saturated

    @property
    def provenance(self) -> FrozenSet[int]:
        return frozenset(self.parents)

    def assign_score(self, score: NodeScore) -> None:
        if self._score is not None and self._score != score:
            raise ValueError(f"node {self.id} is already scored")
        self._score = score

    def ensure_score(self, scorer: Callable[[GraphPattern], NodeScore]) -> float:
        if self._score is None:
            self._score = scorer(self.pattern)
        return self._score.value
