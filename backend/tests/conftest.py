from __future__ import annotations

from typing import Callable, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_reformulation_service
from backend.app.services.reformulation_service import ReformulationService

from gref.config.settings import GrefConfig
from gref.graph.graph_pattern import GraphPattern
from gref.matching.aggregation import FrequencySupport
from gref.matching.equivalence import IsomorphismEquivalence
from gref.matching.generators import CandidateGenerator
from gref.matching.matcher import SubgraphMatcher


def make_pattern(labels, edges=(), *, directed=False, name=None) -> GraphPattern:
    return GraphPattern.create(labels, edges, directed=directed, name=name)


class ScriptedGenerator(CandidateGenerator):
    """
    Proposes whatever the script returns for a pattern.
    """

    name = "scripted"

    def __init__(self, script: Callable[[GraphPattern], List[GraphPattern]]) -> None:
        self.script = script
        self.calls: List[GraphPattern] = []

    def generate(self, pattern: GraphPattern) -> List[GraphPattern]:
        self.calls.append(pattern)
        return list(self.script(pattern))


def script_from(pairs) -> Callable[[GraphPattern], List[GraphPattern]]:
    """
    Map source patterns to candidates by structural equality.
    """
    equivalence = IsomorphismEquivalence()

    def _script(pattern: GraphPattern) -> List[GraphPattern]:
        for source, candidates in pairs:
            if equivalence.equal(source, pattern):
                return candidates
        return []

    return _script


@pytest.fixture()
def matcher() -> SubgraphMatcher:
    return SubgraphMatcher().initialize()


@pytest.fixture()
def aggregator() -> FrequencySupport:
    return FrequencySupport()


@pytest.fixture()
def query() -> GraphPattern:
    # A -x- B
    return make_pattern(["A", "B"], [(0, 1, "x")])


@pytest.fixture()
def database() -> List[GraphPattern]:
    return [
        make_pattern(["A", "B"], [(0, 1, "x")], name="G1"),
        make_pattern(["A", "B", "C"], [(0, 1, "x"), (1, 2, "y")], name="G2"),
        make_pattern(["A", "B"], [(0, 1, "y")], name="G3"),
    ]


@pytest.fixture()
def path_query() -> GraphPattern:
    # A -x- B -y- C
    return make_pattern(["A", "B", "C"], [(0, 1, "x"), (1, 2, "y")])


@pytest.fixture()
def mixed_database() -> List[GraphPattern]:
    return [
        make_pattern(["A", "B", "C"], [(0, 1, "x"), (1, 2, "y")], name="G1"),
        make_pattern(["A", "B", "D"], [(0, 1, "x"), (1, 2, "y")], name="G2"),
        make_pattern(["B", "C"], [(0, 1, "y")], name="G3"),
        make_pattern(["A", "B", "C"], [(0, 1, "z"), (1, 2, "y"), (0, 2, "x")], name="G4"),
        make_pattern(["E"], [], name="G5"),
    ]


@pytest.fixture()
def service(database) -> ReformulationService:
    return ReformulationService(database=database, config=GrefConfig())


@pytest.fixture()
def client(service: ReformulationService):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    app.dependency_overrides[get_reformulation_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
