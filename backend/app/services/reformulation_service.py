from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import logging

from gref.algorithms.base import LatticeAlgorithm
from gref.algorithms.best_first import build_algorithm
from gref.algorithms.budget import SearchBudget, SearchReport
from gref.config.settings import GrefConfig
from gref.export.results_file import result_group
from gref.graph.graph_pattern import GraphPattern
from gref.lattice.node import ReformulationNode
from gref.lattice.reformulation_lattice import ReformulationLattice
from gref.matching.aggregation import build_aggregator
from gref.matching.generators import CandidateGenerator, build_generator
from gref.matching.matcher import GraphMatcher, build_matcher
from gref.utils.helpers import safe_mean


@dataclass
class ReformulationOutcome:
    """
    Everything one search produced for a single query.
    """

    query: GraphPattern
    lattice: ReformulationLattice
    ranked: List[ReformulationNode]
    report: SearchReport

    def group(self, limit: int = 0) -> List[GraphPattern]:
        return result_group(self.lattice, self.ranked, limit=limit)

    def to_dict(self, limit: int = 0) -> Dict[str, Any]:
        ranked = self.ranked[:limit] if limit > 0 else self.ranked
        return {
            "results": [self._node_dict(n) for n in ranked],
            "report": self.report.to_dict(),
        }

    def _node_dict(self, node: ReformulationNode) -> Dict[str, Any]:
        return {
            "id": node.id,
            "score": node.score,
            "generation": node.generation,
            "parents": sorted(node.parents),
            "matched": sorted(node.matched),
            "chain": self.lattice.provenance_chain(node.id),
            "is_query": node.id == self.lattice.root(),
            "nodes": [n.label for n in node.pattern.nodes()],
            "edges": [[e.source, e.target, e.label] for e in node.pattern.edges()],
        }


class ReformulationService:
    """
    Policy-aware orchestration layer for gref.

    This is the ONLY place where:
    - config is interpreted
    - matcher, generator, aggregator and algorithm are wired
    - the matcher is initialized (once, for the service lifetime)
    """

    def __init__(
        self,
        *,
        database: Sequence[GraphPattern],
        config: GrefConfig,
        matcher: Optional[GraphMatcher] = None,
        generator: Optional[CandidateGenerator] = None,
    ) -> None:
        self.database = list(database)
        self.config = config

        self.matcher = matcher or build_matcher(
            config.match.matcher,
            wildcard=config.match.wildcard,
            label_prefilter=config.match.label_prefilter,
        )
        self.matcher.initialize()

        self.generator = generator or build_generator(
            config.generation,
            wildcard=config.match.wildcard,
        )
        self.aggregator = build_aggregator(config.search.aggregation)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def reformulate(
        self,
        query: GraphPattern,
        *,
        budget: Optional[SearchBudget] = None,
    ) -> ReformulationOutcome:
        if query.directed != self.config.match.directed:
            raise ValueError(
                "query directedness does not match the configured database"
            )

        lattice = ReformulationLattice(query)
        algorithm = self._algorithm()
        algorithm.set_db(self.database)
        algorithm.set_lattice(lattice)

        ranked = algorithm.run(budget or SearchBudget.from_config(self.config.search))

        logging.getLogger("gref.search").info(
            "query nodes=%s edges=%s -> reformulations=%s termination=%s",
            query.node_count(),
            query.edge_count(),
            len(ranked) - 1,
            algorithm.report.termination.value,
        )
        return ReformulationOutcome(
            query=query,
            lattice=lattice,
            ranked=ranked,
            report=algorithm.report,
        )

    def reformulate_all(
        self,
        queries: Sequence[GraphPattern],
        *,
        budget_factory=None,
    ) -> List[ReformulationOutcome]:
        """
        Search each query independently; `budget_factory` makes a fresh
        budget per query.
        """
        outcomes: List[ReformulationOutcome] = []
        for query in queries:
            budget = budget_factory() if budget_factory is not None else None
            outcomes.append(self.reformulate(query, budget=budget))
        return outcomes

    def stats(self) -> Dict[str, Any]:
        return {
            "graphs": len(self.database),
            "directed": self.config.match.directed,
            "avg_nodes": safe_mean(g.node_count() for g in self.database),
            "avg_edges": safe_mean(g.edge_count() for g in self.database),
            "algorithm": self.config.search.algorithm,
            "aggregation": self.config.search.aggregation,
            "generators": list(self.config.generation.strategies),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _algorithm(self) -> LatticeAlgorithm:
        return build_algorithm(
            self.config.search.algorithm,
            matcher=self.matcher,
            generator=self.generator,
            aggregator=self.aggregator,
            workers=self.config.search.workers,
            prune_saturated=self.config.search.prune_saturated,
        )
