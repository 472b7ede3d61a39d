from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import contextmanager
from itertools import repeat
from typing import Iterable, Iterator, List, Optional, Tuple
import heapq
import logging
import time

import networkx as nx

from gref.algorithms.budget import Diagnostic, SearchBudget, SearchReport, Termination
from gref.errors import (
    DuplicateEdgeViolation,
    GrefError,
    LatticeFrozenError,
    MatchFailure,
    MatcherNotReady,
    MissingInputError,
)
from gref.graph.graph_pattern import GraphPattern
from gref.lattice.node import NodeScore, ReformulationNode
from gref.lattice.reformulation_lattice import ReformulationLattice
from gref.matching.aggregation import SupportAggregator
from gref.matching.generators import CandidateGenerator
from gref.matching.matcher import GraphMatcher


class LatticeAlgorithm(ABC):
    """
    Abstract orchestrator of a lattice search.

    The run loop is a bounded priority search: pop the best unexpanded
    node, generate its generalizations, deduplicate them against the
    lattice, score the new ones against the database and push them.
    Variants only decide the frontier priority.

    The orchestrating thread is the single writer of the lattice. Scoring
    a pattern fans out over the database on a worker pool and is reduced
    before the node is inserted.
    """

    name: str = "abstract"

    def __init__(
        self,
        *,
        matcher: GraphMatcher,
        generator: CandidateGenerator,
        aggregator: SupportAggregator,
        workers: int = 1,
        prune_saturated: bool = True,
    ) -> None:
        if not matcher.ready:
            raise MatcherNotReady(
                "initialize() the matcher before constructing the algorithm"
            )
        self.matcher = matcher
        self.generator = generator
        self.aggregator = aggregator
        self.workers = max(1, int(workers))
        self.prune_saturated = prune_saturated

        self.gdb: Optional[List[GraphPattern]] = None
        self.lattice: Optional[ReformulationLattice] = None
        self.report: Optional[SearchReport] = None

    # ------------------------------------------------------------------
    # Mandatory inputs
    # ------------------------------------------------------------------

    def set_db(self, graphs: Iterable[GraphPattern]) -> None:
        self.gdb = list(graphs)

    def set_lattice(self, lattice: ReformulationLattice) -> None:
        self.lattice = lattice

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    @abstractmethod
    def priority(self, node: ReformulationNode) -> Tuple:
        """
        Frontier key; the smallest key is expanded first.
        """
        raise NotImplementedError

    def should_expand(self, node: ReformulationNode, budget: SearchBudget) -> bool:
        if not budget.allows_depth(node.generation):
            return False
        # Every generalization of a saturated node scores the same and
        # ranks after it on generation.
        if self.prune_saturated and node.saturated:
            return False
        return True

    @staticmethod
    def rank(nodes: Iterable[ReformulationNode]) -> List[ReformulationNode]:
        return sorted(nodes, key=lambda n: (-n.score, n.generation, n.id))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, budget: Optional[SearchBudget] = None) -> List[ReformulationNode]:
        """
        Search the lattice and return every discovered node, ranked by
        descending score, then ascending generation, then discovery order.
        """
        if self.gdb is None:
            raise MissingInputError("gdb")
        if self.lattice is None:
            raise MissingInputError("lattice")
        if self.lattice.frozen:
            raise LatticeFrozenError("the lattice was already searched")

        budget = budget or SearchBudget()
        lattice = self.lattice
        logger = logging.getLogger("gref.search")
        diagnostics: List[Diagnostic] = []

        t0 = time.perf_counter()
        logger.info(
            "search start algorithm=%s db=%s lattice=%s",
            self.name,
            len(self.gdb),
            len(lattice),
        )

        expansions = 0
        termination = Termination.EXHAUSTED

        with self._scoring_pool() as pool:
            frontier: List[Tuple] = []
            for node in lattice.nodes():
                self._ensure_scored(node, pool, diagnostics)
                heapq.heappush(frontier, (self.priority(node), node.id))

            expanded: set[int] = set()

            while frontier:
                _, node_id = frontier[0]
                node = lattice.get(node_id)
                if node_id in expanded or not self.should_expand(node, budget):
                    heapq.heappop(frontier)
                    expanded.add(node_id)
                    continue

                # Only a node that is about to be expanded consumes budget.
                stop = budget.stop_reason(
                    expansions=expansions,
                    lattice_size=len(lattice),
                    elapsed_s=time.perf_counter() - t0,
                )
                if stop is not None:
                    termination = stop
                    break

                heapq.heappop(frontier)
                expanded.add(node_id)
                expansions += 1
                created, truncated = self._expand(node, pool, budget, diagnostics)
                for child in created:
                    heapq.heappush(frontier, (self.priority(child), child.id))

                if truncated:
                    termination = Termination.BUDGET_EXCEEDED
                    break

        lattice.freeze()
        ranked = self.rank(lattice.nodes())
        elapsed = time.perf_counter() - t0

        self.report = SearchReport(
            termination=termination,
            expansions=expansions,
            lattice_size=len(lattice),
            elapsed_s=elapsed,
            diagnostics=diagnostics,
        )
        logger.info(
            "search done termination=%s expansions=%s nodes=%s diagnostics=%s in %.3fs",
            termination.value,
            expansions,
            len(lattice),
            len(diagnostics),
            elapsed,
        )
        return ranked

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def _expand(
        self,
        node: ReformulationNode,
        pool: Optional[Executor],
        budget: SearchBudget,
        diagnostics: List[Diagnostic],
    ) -> Tuple[List[ReformulationNode], bool]:
        lattice = self.lattice
        logger = logging.getLogger("gref.search")

        try:
            candidates = self.generator.generate(node.pattern)
        except (GrefError, ValueError, nx.NetworkXError) as exc:
            logger.warning("candidate generation failed node=%s: %s", node.id, exc)
            diagnostics.append(
                Diagnostic(kind="generation_failure", message=str(exc), node_id=node.id)
            )
            return [], False

        created: List[ReformulationNode] = []

        for pattern in candidates:
            existing = lattice.find(pattern)

            if existing is not None:
                if existing == node.id or lattice.is_ancestor(node.id, existing):
                    logger.debug(
                        "discarded candidate of node=%s equal to specialization %s",
                        node.id,
                        existing,
                    )
                    continue
                try:
                    lattice.insert(pattern, {node.id})
                except DuplicateEdgeViolation as exc:
                    self._record_violation(exc, node, diagnostics)
                continue

            if not budget.allows_nodes(len(lattice)):
                return created, True

            score = self._score(pattern, pool, diagnostics)
            try:
                child_id = lattice.insert(pattern, {node.id}, score=score)
            except DuplicateEdgeViolation as exc:
                self._record_violation(exc, node, diagnostics)
                continue
            created.append(lattice.get(child_id))

        logger.debug(
            "expanded node=%s candidates=%s new=%s",
            node.id,
            len(candidates),
            len(created),
        )
        return created, False

    def _record_violation(
        self,
        exc: DuplicateEdgeViolation,
        node: ReformulationNode,
        diagnostics: List[Diagnostic],
    ) -> None:
        logging.getLogger("gref.lattice").warning(
            "dropped candidate of node=%s: %s", node.id, exc
        )
        diagnostics.append(
            Diagnostic(kind="duplicate_edge", message=str(exc), node_id=node.id)
        )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @contextmanager
    def _scoring_pool(self) -> Iterator[Optional[Executor]]:
        if self.workers <= 1:
            yield None
            return
        with ThreadPoolExecutor(
            max_workers=self.workers,
            thread_name_prefix="gref-score",
        ) as pool:
            yield pool

    def _ensure_scored(
        self,
        node: ReformulationNode,
        pool: Optional[Executor],
        diagnostics: List[Diagnostic],
    ) -> None:
        node.ensure_score(lambda pattern: self._score(pattern, pool, diagnostics))

    def _score(
        self,
        pattern: GraphPattern,
        pool: Optional[Executor],
        diagnostics: List[Diagnostic],
    ) -> NodeScore:
        gdb = self.gdb
        if pool is None:
            pairs = [self._score_pair(pattern, i, g) for i, g in enumerate(gdb)]
        else:
            pairs = list(pool.map(self._score_pair, repeat(pattern), range(len(gdb)), gdb))

        contributions: List[float] = []
        for value, failure in pairs:
            contributions.append(value)
            if failure is not None:
                diagnostics.append(failure)

        return NodeScore(
            value=self.aggregator.aggregate(contributions),
            matched=frozenset(i for i, v in enumerate(contributions) if v > 0),
            saturated=all(v >= self.matcher.max_score for v in contributions),
        )

    def _score_pair(
        self,
        pattern: GraphPattern,
        index: int,
        graph: GraphPattern,
    ) -> Tuple[float, Optional[Diagnostic]]:
        try:
            return float(self.matcher.score(pattern, graph)), None
        except MatchFailure as exc:
            logging.getLogger("gref.match").warning(
                "match failure graph=%s pattern=%r: %s", index, pattern, exc
            )
            return 0.0, Diagnostic(
                kind="match_failure",
                message=str(exc),
                graph_index=index,
            )

