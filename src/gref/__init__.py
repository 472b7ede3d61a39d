"""
gref
====

Graph query reformulation over a lattice of generalizations.

Starting from a graph-shaped query, gref derives broader reformulations,
scores each one by its support in a graph database, and keeps them in a
lattice ordered by generalization. A bounded best-first search explores
the lattice and returns a ranked, deterministic result set.

Public API:
- GraphPattern
- ReformulationLattice
- BestFirstLatticeAlgorithm
- SubgraphMatcher
"""

from gref.graph.graph_pattern import GraphPattern
from gref.lattice.reformulation_lattice import ReformulationLattice
from gref.algorithms.best_first import BestFirstLatticeAlgorithm
from gref.algorithms.budget import SearchBudget
from gref.matching.matcher import SubgraphMatcher

__all__ = [
    "GraphPattern",
    "ReformulationLattice",
    "BestFirstLatticeAlgorithm",
    "SearchBudget",
    "SubgraphMatcher",
]

__version__ = "0.1.0"
