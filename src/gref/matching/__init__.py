"""
Pluggable matching policies.

- PatternEquivalence: structural equality used for lattice deduplication
- GraphMatcher: pattern-vs-database-graph comparison
- CandidateGenerator: structural generalizations of a pattern
- SupportAggregator: reduction of per-graph contributions into a score

Concrete strategies are selected by name through the registries below.
"""

from gref.matching.equivalence import PatternEquivalence, IsomorphismEquivalence
from gref.matching.matcher import (
    GraphMatcher,
    SubgraphMatcher,
    MATCHERS,
    build_matcher,
)
from gref.matching.aggregation import (
    SupportAggregator,
    CountSupport,
    FrequencySupport,
    AGGREGATORS,
    build_aggregator,
)
from gref.matching.generators import (
    CandidateGenerator,
    EdgeRemovalGenerator,
    NodeRemovalGenerator,
    LabelRelaxationGenerator,
    CompositeGenerator,
    GENERATORS,
    build_generator,
)

__all__ = [
    "PatternEquivalence",
    "IsomorphismEquivalence",
    "GraphMatcher",
    "SubgraphMatcher",
    "MATCHERS",
    "build_matcher",
    "SupportAggregator",
    "CountSupport",
    "FrequencySupport",
    "AGGREGATORS",
    "build_aggregator",
    "CandidateGenerator",
    "EdgeRemovalGenerator",
    "NodeRemovalGenerator",
    "LabelRelaxationGenerator",
    "CompositeGenerator",
    "GENERATORS",
    "build_generator",
]
