from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from gref.utils.helpers import safe_mean


class SupportAggregator(ABC):
    """
    Reduces per-graph match contributions into a node score.

    Implementations must be monotone: if every contribution grows, the
    aggregate does not shrink. Together with a sound generator this makes
    generalization never lower support.
    """

    name: str = "abstract"

    @abstractmethod
    def aggregate(self, contributions: Sequence[float]) -> float:
        raise NotImplementedError


class CountSupport(SupportAggregator):
    """
    Number of database graphs matched (sum of contributions).
    """

    name = "count"

    def aggregate(self, contributions: Sequence[float]) -> float:
        if len(contributions) == 0:
            return 0.0
        return float(np.sum(contributions))


class FrequencySupport(SupportAggregator):
    """
    Fraction of the database matched; 0 for an empty database.
    """

    name = "frequency"

    def aggregate(self, contributions: Sequence[float]) -> float:
        return safe_mean(contributions)


AGGREGATORS = {
    CountSupport.name: CountSupport,
    FrequencySupport.name: FrequencySupport,
}


def build_aggregator(name: str) -> SupportAggregator:
    try:
        return AGGREGATORS[name]()
    except KeyError as exc:
        raise ValueError(f"unknown aggregation {name!r}") from exc
