from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from gref.config.settings import GenerationConfig
from gref.graph.graph_pattern import GraphPattern
from gref.graph.graph_schema import WILDCARD


class CandidateGenerator(ABC):
    """
    Proposes structural generalizations of a pattern.

    Every candidate must be at least as permissive as its source: any
    database graph matched by the source must also be matched by the
    candidate. Output order must be deterministic.
    """

    name: str = "abstract"

    @abstractmethod
    def generate(self, pattern: GraphPattern) -> List[GraphPattern]:
        raise NotImplementedError


class EdgeRemovalGenerator(CandidateGenerator):
    """
    Drops one edge at a time.
    """

    name = "edge_removal"

    def __init__(self, *, drop_isolated: bool = True, min_nodes: int = 1) -> None:
        self.drop_isolated = drop_isolated
        self.min_nodes = min_nodes

    def generate(self, pattern: GraphPattern) -> List[GraphPattern]:
        candidates: List[GraphPattern] = []

        for edge in pattern.edges():
            candidate = pattern.without_edge(edge.source, edge.target)
            if self.drop_isolated:
                candidate = candidate.without_isolated()
            if candidate.node_count() >= self.min_nodes:
                candidates.append(candidate)

        return candidates


class NodeRemovalGenerator(CandidateGenerator):
    """
    Drops one isolated or leaf vertex together with its edge.
    """

    name = "node_removal"

    def __init__(self, *, min_nodes: int = 1) -> None:
        self.min_nodes = min_nodes

    def generate(self, pattern: GraphPattern) -> List[GraphPattern]:
        if pattern.node_count() - 1 < self.min_nodes:
            return []

        return [
            pattern.without_node(node.id)
            for node in pattern.nodes()
            if pattern.degree(node.id) <= 1
        ]


class LabelRelaxationGenerator(CandidateGenerator):
    """
    Replaces one concrete vertex or edge label with the wildcard.
    """

    name = "label_relaxation"

    def __init__(
        self,
        *,
        wildcard: str = WILDCARD,
        relax_nodes: bool = True,
        relax_edges: bool = True,
    ) -> None:
        self.wildcard = wildcard
        self.relax_nodes = relax_nodes
        self.relax_edges = relax_edges

    def generate(self, pattern: GraphPattern) -> List[GraphPattern]:
        candidates: List[GraphPattern] = []

        if self.relax_nodes:
            for node in pattern.nodes():
                if node.label != self.wildcard:
                    candidates.append(pattern.relabel_node(node.id, self.wildcard))

        if self.relax_edges:
            for edge in pattern.edges():
                if edge.label != self.wildcard:
                    candidates.append(
                        pattern.relabel_edge(edge.source, edge.target, self.wildcard)
                    )

        return candidates


class CompositeGenerator(CandidateGenerator):
    """
    Concatenates the candidates of several generators, in order.
    """

    name = "composite"

    def __init__(self, generators: Sequence[CandidateGenerator]) -> None:
        self.generators = list(generators)

    def generate(self, pattern: GraphPattern) -> List[GraphPattern]:
        candidates: List[GraphPattern] = []
        for generator in self.generators:
            candidates.extend(generator.generate(pattern))
        return candidates


GENERATORS = {
    EdgeRemovalGenerator.name: EdgeRemovalGenerator,
    NodeRemovalGenerator.name: NodeRemovalGenerator,
    LabelRelaxationGenerator.name: LabelRelaxationGenerator,
}


def build_generator(
    config: GenerationConfig,
    *,
    wildcard: str = WILDCARD,
) -> CandidateGenerator:
    """
    Build the configured generator; several strategies become a composite.
    """
    generators: List[CandidateGenerator] = []

    for name in config.strategies:
        if name == EdgeRemovalGenerator.name:
            generators.append(
                EdgeRemovalGenerator(
                    drop_isolated=config.drop_isolated,
                    min_nodes=config.min_nodes,
                )
            )
        elif name == NodeRemovalGenerator.name:
            generators.append(NodeRemovalGenerator(min_nodes=config.min_nodes))
        elif name == LabelRelaxationGenerator.name:
            generators.append(
                LabelRelaxationGenerator(
                    wildcard=wildcard,
                    relax_nodes=config.relax_node_labels,
                    relax_edges=config.relax_edge_labels,
                )
            )
        else:
            raise ValueError(f"unknown generation strategy {name!r}")

    if not generators:
        raise ValueError("at least one generation strategy is required")
    if len(generators) == 1:
        return generators[0]
    return CompositeGenerator(generators)
