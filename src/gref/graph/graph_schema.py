from __future__ import annotations

from dataclasses import dataclass

WILDCARD = "*"


@dataclass(frozen=True)
class PatternNode:
    """
    Labeled vertex of a graph pattern, identified by its position.
    """

    id: int
    label: str

    @property
    def is_wildcard(self) -> bool:
        return self.label == WILDCARD


@dataclass(frozen=True)
class PatternEdge:
    """
    Labeled edge between two pattern vertices.

    For undirected patterns `source <= target` always holds.
    """

    source: int
    target: int
    label: str

    @property
    def is_wildcard(self) -> bool:
        return self.label == WILDCARD
