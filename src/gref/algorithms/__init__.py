"""
Lattice search algorithms.
"""

from gref.algorithms.budget import (
    Termination,
    SearchBudget,
    Diagnostic,
    SearchReport,
)
from gref.algorithms.base import LatticeAlgorithm
from gref.algorithms.best_first import (
    BestFirstLatticeAlgorithm,
    BreadthFirstLatticeAlgorithm,
    ALGORITHMS,
    build_algorithm,
)

__all__ = [
    "Termination",
    "SearchBudget",
    "Diagnostic",
    "SearchReport",
    "LatticeAlgorithm",
    "BestFirstLatticeAlgorithm",
    "BreadthFirstLatticeAlgorithm",
    "ALGORITHMS",
    "build_algorithm",
]
