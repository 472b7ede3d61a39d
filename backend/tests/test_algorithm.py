from itertools import combinations
import time

import pytest

from gref.algorithms.base import LatticeAlgorithm
from gref.algorithms.best_first import (
    BestFirstLatticeAlgorithm,
    BreadthFirstLatticeAlgorithm,
    build_algorithm,
)
from gref.algorithms.budget import SearchBudget, Termination
from gref.config.settings import GenerationConfig
from gref.errors import LatticeFrozenError, MatchFailure, MatcherNotReady, MissingInputError
from gref.graph.graph_schema import WILDCARD
from gref.lattice.reformulation_lattice import ReformulationLattice
from gref.matching.aggregation import CountSupport
from gref.matching.generators import CandidateGenerator, build_generator
from gref.matching.matcher import SubgraphMatcher

from conftest import ScriptedGenerator, make_pattern, script_from


def _default_generator():
    return build_generator(
        GenerationConfig(strategies=("edge_removal", "label_relaxation"))
    )


def _search(query, database, matcher, aggregator, *, generator=None, budget=None, **kwargs):
    algorithm = BestFirstLatticeAlgorithm(
        matcher=matcher,
        generator=generator or _default_generator(),
        aggregator=aggregator,
        **kwargs,
    )
    lattice = ReformulationLattice(query)
    algorithm.set_db(database)
    algorithm.set_lattice(lattice)
    ranked = algorithm.run(budget)
    return algorithm, lattice, ranked


def _signature(ranked):
    return [
        (n.id, n.score, n.generation, tuple(sorted(n.parents)), repr(n.pattern))
        for n in ranked
    ]


# -------------------- Scenarios --------------------


def test_broader_reformulation_ranks_first(query, database, matcher, aggregator):
    relaxed = make_pattern(["A", "B"], [(0, 1, WILDCARD)])
    generator = ScriptedGenerator(script_from([(query, [relaxed])]))

    algorithm, lattice, ranked = _search(
        query, database, matcher, aggregator, generator=generator
    )

    assert [n.id for n in ranked] == [1, 0]
    assert ranked[0].score == 1.0
    assert ranked[1].score == pytest.approx(2 / 3)
    assert ranked[0].provenance == frozenset({0})
    assert ranked[0].matched == frozenset({0, 1, 2})
    assert ranked[1].matched == frozenset({0, 1})
    assert algorithm.report.termination is Termination.EXHAUSTED


def test_empty_database_returns_only_the_root(query, matcher, aggregator):
    algorithm, lattice, ranked = _search(query, [], matcher, aggregator)

    assert len(ranked) == 1
    assert ranked[0].id == lattice.root()
    assert ranked[0].score == 0.0
    assert len(lattice) == 1
    assert algorithm.report.expansions == 0


def test_candidate_equal_to_root_is_discarded(query, database, matcher, aggregator):
    same_as_root = make_pattern(["B", "A"], [(1, 0, "x")])
    generator = ScriptedGenerator(lambda p: [same_as_root])

    algorithm, lattice, ranked = _search(
        query, database, matcher, aggregator, generator=generator
    )

    assert len(lattice) == 1
    assert lattice.edges() == []
    assert algorithm.report.expansions == 1
    assert algorithm.report.diagnostics == []


def test_candidate_equal_to_a_specialization_is_discarded(path_query, mixed_database, matcher, aggregator):
    general = make_pattern(["A", "B"], [(0, 1, "x")])
    generator = ScriptedGenerator(
        script_from([(path_query, [general]), (general, [path_query])])
    )

    _, lattice, ranked = _search(
        path_query, mixed_database, matcher, aggregator, generator=generator
    )

    assert len(lattice) == 2
    assert lattice.edges() == [(1, 0)]
    assert lattice.is_acyclic()


def test_convergent_reformulations_share_a_node(query, database, matcher):
    left = make_pattern([WILDCARD, "B"], [(0, 1, "x")])
    right = make_pattern(["A", WILDCARD], [(0, 1, "x")])
    top = make_pattern([WILDCARD, WILDCARD], [(0, 1, "x")])
    generator = ScriptedGenerator(
        script_from([(query, [left, right]), (left, [top]), (right, [top])])
    )

    _, lattice, ranked = _search(
        query, database, matcher, CountSupport(),
        generator=generator, prune_saturated=False,
    )

    top_id = lattice.find(top)
    assert len(lattice) == 4
    assert lattice.get(top_id).parents == {lattice.find(left), lattice.find(right)}
    assert ranked[0].id == 0
    # `top` is expanded once even though it was reached twice
    assert sum(1 for p in generator.calls if lattice.find(p) == top_id) == 1


# -------------------- Invariants --------------------


def test_search_is_deterministic(path_query, mixed_database, matcher, aggregator):
    budget = SearchBudget(max_expansions=25)
    _, _, first = _search(path_query, mixed_database, matcher, aggregator, budget=budget)
    _, _, second = _search(
        path_query, mixed_database, matcher, aggregator,
        budget=SearchBudget(max_expansions=25),
    )

    assert _signature(first) == _signature(second)


def test_lattice_invariants_hold_after_search(path_query, mixed_database, matcher, aggregator):
    _, lattice, ranked = _search(path_query, mixed_database, matcher, aggregator)

    assert lattice.frozen
    assert lattice.is_acyclic()
    assert len(ranked) == len(lattice)

    for a, b in combinations(lattice.nodes(), 2):
        assert not lattice.equivalence.equal(a.pattern, b.pattern)

    for general, specific in lattice.edges():
        assert lattice.get(general).matched >= lattice.get(specific).matched

    keys = [(-n.score, n.generation, n.id) for n in ranked]
    assert keys == sorted(keys)


def test_parallel_scoring_matches_sequential(path_query, mixed_database, matcher, aggregator):
    _, _, sequential = _search(path_query, mixed_database, matcher, aggregator)
    _, _, parallel = _search(
        path_query, mixed_database, matcher, aggregator, workers=4
    )

    assert _signature(parallel) == _signature(sequential)


# -------------------- Budget & cancellation --------------------


def test_expansion_budget_stops_search(path_query, mixed_database, matcher, aggregator):
    algorithm, lattice, ranked = _search(
        path_query, mixed_database, matcher, aggregator,
        budget=SearchBudget(max_expansions=1),
    )

    assert algorithm.report.termination is Termination.BUDGET_EXCEEDED
    assert algorithm.report.expansions == 1
    assert len(ranked) == len(lattice) > 1


def test_finished_search_is_exhausted_despite_expansion_budget(query, database, matcher, aggregator):
    relaxed = make_pattern(["A", "B"], [(0, 1, WILDCARD)])
    generator = ScriptedGenerator(script_from([(query, [relaxed])]))

    limited, limited_lattice, _ = _search(
        query, database, matcher, aggregator,
        generator=generator, budget=SearchBudget(max_expansions=1),
    )
    unbounded, unbounded_lattice, _ = _search(
        query, database, matcher, aggregator, generator=generator
    )

    assert limited.report.termination is Termination.EXHAUSTED
    assert unbounded.report.termination is Termination.EXHAUSTED
    assert limited.report.expansions == unbounded.report.expansions == 1
    assert len(limited_lattice) == len(unbounded_lattice) == 2


def test_depth_capped_frontier_is_exhausted(path_query, mixed_database, matcher, aggregator):
    algorithm, _, _ = _search(
        path_query, mixed_database, matcher, aggregator,
        budget=SearchBudget(max_expansions=1, max_depth=1),
    )

    assert algorithm.report.expansions == 1
    assert algorithm.report.termination is Termination.EXHAUSTED


class SlowGenerator(CandidateGenerator):
    name = "slow"

    def __init__(self, inner, delay_s):
        self.inner = inner
        self.delay_s = delay_s

    def generate(self, pattern):
        time.sleep(self.delay_s)
        return self.inner.generate(pattern)


def test_timeout_stops_search(path_query, mixed_database, matcher, aggregator):
    algorithm, lattice, ranked = _search(
        path_query, mixed_database, matcher, aggregator,
        generator=SlowGenerator(_default_generator(), delay_s=0.3),
        budget=SearchBudget(timeout_s=0.25),
    )

    assert algorithm.report.termination is Termination.BUDGET_EXCEEDED
    assert algorithm.report.expansions == 1
    assert algorithm.report.elapsed_s >= 0.25
    assert len(ranked) == len(lattice) > 1
    assert lattice.is_acyclic()
    for a, b in combinations(lattice.nodes(), 2):
        assert not lattice.equivalence.equal(a.pattern, b.pattern)


def test_node_budget_caps_lattice_size(path_query, mixed_database, matcher, aggregator):
    algorithm, lattice, _ = _search(
        path_query, mixed_database, matcher, aggregator,
        budget=SearchBudget(max_nodes=3),
    )

    assert len(lattice) == 3
    assert algorithm.report.termination is Termination.BUDGET_EXCEEDED


def test_depth_budget_limits_generations(path_query, mixed_database, matcher, aggregator):
    algorithm, lattice, _ = _search(
        path_query, mixed_database, matcher, aggregator,
        budget=SearchBudget(max_depth=1),
    )

    assert max(n.generation for n in lattice.nodes()) == 1
    assert algorithm.report.expansions == 1
    assert algorithm.report.termination is Termination.EXHAUSTED


def test_cancelled_budget_stops_before_expanding(path_query, mixed_database, matcher, aggregator):
    budget = SearchBudget()
    budget.cancel()

    algorithm, lattice, ranked = _search(
        path_query, mixed_database, matcher, aggregator, budget=budget
    )

    assert algorithm.report.termination is Termination.CANCELLED
    assert [n.id for n in ranked] == [0]
    assert ranked[0].scored


# -------------------- Failure isolation --------------------


class FlakyMatcher(SubgraphMatcher):
    name = "flaky"

    def _embeds(self, pattern, target):
        if target.name == "broken":
            raise MatchFailure("malformed graph")
        return super()._embeds(pattern, target)


def test_match_failures_count_as_zero(query, database, aggregator):
    broken = make_pattern(["A", "B"], [(0, 1, "x")], name="broken")
    matcher = FlakyMatcher().initialize()

    algorithm, lattice, ranked = _search(
        query, database + [broken], matcher, aggregator
    )

    root = lattice.get(0)
    assert root.score == pytest.approx(2 / 4)
    assert 3 not in root.matched
    failures = [d for d in algorithm.report.diagnostics if d.kind == "match_failure"]
    assert failures
    assert all(d.graph_index == 3 for d in failures)
    assert len(ranked) > 1


def test_generator_failure_is_isolated(query, database, matcher, aggregator):
    def _explode(pattern):
        raise ValueError("cannot generalize")

    algorithm, lattice, ranked = _search(
        query, database, matcher, aggregator, generator=ScriptedGenerator(_explode)
    )

    assert [n.id for n in ranked] == [0]
    assert [d.kind for d in algorithm.report.diagnostics] == ["generation_failure"]
    assert algorithm.report.diagnostics[0].node_id == 0


# -------------------- Configuration errors --------------------


def test_missing_inputs_are_fatal(query, database, matcher, aggregator):
    algorithm = BestFirstLatticeAlgorithm(
        matcher=matcher, generator=_default_generator(), aggregator=aggregator
    )

    with pytest.raises(MissingInputError):
        algorithm.run()

    algorithm.set_db(database)
    with pytest.raises(MissingInputError):
        algorithm.run()

    assert algorithm.report is None


def test_uninitialized_matcher_is_rejected(aggregator):
    with pytest.raises(MatcherNotReady):
        BestFirstLatticeAlgorithm(
            matcher=SubgraphMatcher(),
            generator=_default_generator(),
            aggregator=aggregator,
        )


def test_lattice_cannot_be_searched_twice(query, database, matcher, aggregator):
    algorithm, lattice, _ = _search(query, database, matcher, aggregator)

    with pytest.raises(LatticeFrozenError):
        algorithm.run()


# -------------------- Variants --------------------


def test_priorities_of_variants(query, database, matcher, aggregator):
    best, lattice, _ = _search(query, database, matcher, aggregator)
    breadth = build_algorithm(
        "breadth_first",
        matcher=matcher,
        generator=_default_generator(),
        aggregator=aggregator,
    )
    root = lattice.get(0)

    assert isinstance(breadth, BreadthFirstLatticeAlgorithm)
    assert isinstance(breadth, LatticeAlgorithm)
    assert best.priority(root) == (-root.score, 0, 0)
    assert breadth.priority(root) == (0, -root.score, 0)

    with pytest.raises(ValueError):
        build_algorithm("random_walk")


def test_breadth_first_explores_level_by_level(path_query, mixed_database, matcher, aggregator):
    algorithm = build_algorithm(
        "breadth_first",
        matcher=matcher,
        generator=_default_generator(),
        aggregator=aggregator,
    )
    lattice = ReformulationLattice(path_query)
    algorithm.set_db(mixed_database)
    algorithm.set_lattice(lattice)

    algorithm.run(SearchBudget(max_expansions=1))

    assert all(n.generation <= 1 for n in lattice.nodes())
    assert len(lattice) == 1 + 7
