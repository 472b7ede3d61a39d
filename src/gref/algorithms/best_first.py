from __future__ import annotations

from typing import Tuple

from gref.algorithms.base import LatticeAlgorithm
from gref.lattice.node import ReformulationNode


class BestFirstLatticeAlgorithm(LatticeAlgorithm):
    """
    Expands the highest-scoring node first.

    Ties go to the smaller generation (closer to the query, more
    specific), then to discovery order.
    """

    name = "best_first"

    def priority(self, node: ReformulationNode) -> Tuple:
        return (-node.score, node.generation, node.id)


class BreadthFirstLatticeAlgorithm(LatticeAlgorithm):
    """
    Expands the lattice level by level, best score first within a level.
    """

    name = "breadth_first"

    def priority(self, node: ReformulationNode) -> Tuple:
        return (node.generation, -node.score, node.id)


ALGORITHMS = {
    BestFirstLatticeAlgorithm.name: BestFirstLatticeAlgorithm,
    BreadthFirstLatticeAlgorithm.name: BreadthFirstLatticeAlgorithm,
}


def build_algorithm(name: str, **kwargs) -> LatticeAlgorithm:
    try:
        algorithm_cls = ALGORITHMS[name]
    except KeyError as exc:
        raise ValueError(f"unknown lattice algorithm {name!r}") from exc
    return algorithm_cls(**kwargs)
