from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from gref.config.settings import SearchConfig


class Termination(str, Enum):
    """
    Why a search stopped. None of these is an error.
    """

    EXHAUSTED = "exhausted"
    BUDGET_EXCEEDED = "budget_exceeded"
    CANCELLED = "cancelled"


@dataclass
class SearchBudget:
    """
    Caller-specified bounds on a lattice search. A limit of 0 is unbounded.

    - max_expansions: nodes expanded (generator invocations)
    - max_nodes: lattice size
    - max_depth: nodes at this generation are kept but not expanded
    - timeout_s: wall-clock limit, checked between expansions
    """

    max_expansions: int = 0
    max_nodes: int = 0
    max_depth: int = 0
    timeout_s: float = 0.0
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def from_config(cls, config: SearchConfig) -> "SearchBudget":
        return cls(
            max_expansions=max(0, int(config.max_expansions)),
            max_nodes=max(0, int(config.max_nodes)),
            max_depth=max(0, int(config.max_depth)),
            timeout_s=max(0.0, float(config.timeout_s)),
        )

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def allows_nodes(self, lattice_size: int) -> bool:
        return self.max_nodes <= 0 or lattice_size < self.max_nodes

    def allows_depth(self, generation: int) -> bool:
        return self.max_depth <= 0 or generation < self.max_depth

    def stop_reason(
        self,
        *,
        expansions: int,
        lattice_size: int,
        elapsed_s: float,
    ) -> Optional[Termination]:
        if self.cancelled:
            return Termination.CANCELLED
        if self.max_expansions > 0 and expansions >= self.max_expansions:
            return Termination.BUDGET_EXCEEDED
        if self.max_nodes > 0 and lattice_size >= self.max_nodes:
            return Termination.BUDGET_EXCEEDED
        if self.timeout_s > 0 and elapsed_s >= self.timeout_s:
            return Termination.BUDGET_EXCEEDED
        return None


@dataclass(frozen=True)
class Diagnostic:
    """
    A recovered, per-comparison or per-candidate failure.
    """

    kind: str
    message: str
    node_id: Optional[int] = None
    graph_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "node_id": self.node_id,
            "graph_index": self.graph_index,
        }


@dataclass
class SearchReport:
    termination: Termination
    expansions: int
    lattice_size: int
    elapsed_s: float
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "termination": self.termination.value,
            "expansions": self.expansions,
            "lattice_size": self.lattice_size,
            "elapsed_s": self.elapsed_s,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
