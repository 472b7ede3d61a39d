from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

# ---------------------------------------------------------------------
# Pattern matching
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class MatchConfig:
    """
    Controls how query patterns are compared against database graphs.
    """

    directed: bool = False
    matcher: Literal["subgraph"] = "subgraph"
    wildcard: str = "*"
    label_prefilter: bool = True


# ---------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationConfig:
    """
    Selects which structural generalizations are proposed for a pattern.
    """

    strategies: Tuple[str, ...] = ("edge_removal", "label_relaxation")
    drop_isolated: bool = True
    relax_node_labels: bool = True
    relax_edge_labels: bool = True
    min_nodes: int = 1


# ---------------------------------------------------------------------
# Lattice search
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class SearchConfig:
    """
    Traversal policy and default budget for the lattice search.

    A limit of 0 means unbounded.
    """

    algorithm: Literal["best_first", "breadth_first"] = "best_first"
    aggregation: Literal["count", "frequency"] = "frequency"
    max_expansions: int = 100
    max_nodes: int = 0
    max_depth: int = 0
    timeout_s: float = 0.0
    workers: int = 1
    prune_saturated: bool = True


# ---------------------------------------------------------------------
# Result export
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ExportConfig:
    """
    Controls how ranked reformulations are rendered as drawable graphs.
    """

    output_folder: str = "OutputData"
    prefix: str = "results"
    node_labels_path: Optional[str] = None
    edge_labels_path: Optional[str] = None
    separator: str = "\t"
    directed: bool = False
    max_reformulations: int = 0


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GrefConfig:
    """
    Root configuration object for gref.

    Constructed explicitly by the application layer and passed to the
    service that wires matcher, generator, aggregator and algorithm.
    """

    match: MatchConfig = MatchConfig()
    generation: GenerationConfig = GenerationConfig()
    search: SearchConfig = SearchConfig()
    export: ExportConfig = ExportConfig()
