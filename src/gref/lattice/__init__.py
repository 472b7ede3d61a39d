"""
Reformulation lattice: candidate reformulations ordered by generalization.
"""

from gref.lattice.node import NodeScore, ReformulationNode
from gref.lattice.reformulation_lattice import ReformulationLattice

__all__ = [
    "NodeScore",
    "ReformulationNode",
    "ReformulationLattice",
]
