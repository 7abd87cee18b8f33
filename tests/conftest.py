"""pytest configuration and shared fakes."""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Tuple

import pytest

from basket_recs.config import RecommenderSettings
from basket_recs.errors import StoreUnavailable
from basket_recs.recommendation import RuleRecommender
from basket_recs.rules.schema import SeedItem


class FakeRuleStore:
    """
    In-memory RuleStore. `tables` maps table name -> list of (main, cost, sets)
    rows; every query is recorded as (table, seed, min_confidence, max_rows).
    """

    def __init__(self, tables: Optional[Dict[str, List[Tuple[Any, float, Any]]]] = None) -> None:
        self.tables = tables or {}
        self.calls: List[Tuple[str, Any, float, int]] = []
        self.fail_on: Optional[str] = None

    def query(self, table: str, seed_item_id: Any, min_confidence: float, max_rows: int) -> List[Dict[str, Any]]:
        self.calls.append((table, seed_item_id, min_confidence, max_rows))
        if self.fail_on is not None and table == self.fail_on:
            raise StoreUnavailable(f"{table} is down", table=table)
        rows = [
            {"id": i, "main": main, "cost": cost, "sets": sets}
            for i, (main, cost, sets) in enumerate(self.tables.get(table, []))
            if main == seed_item_id and cost >= min_confidence
        ]
        rows.sort(key=lambda r: (-r["cost"], r["id"]))
        return rows[:max_rows]

    def tables_queried(self) -> List[str]:
        return [call[0] for call in self.calls]


class FakeTopSelector:
    def __init__(self, seeds: List[SeedItem]) -> None:
        self.seeds = seeds
        self.calls: List[int] = []

    def top(self, count: int) -> List[SeedItem]:
        self.calls.append(count)
        return self.seeds[:count]


# Two seeds, A and B, with rules in the FPGrowth primary table ("costs").
SCENARIO_ROWS = [
    ("A", 0.8, '["X", "Y"]'),
    ("A", 0.5, '["Z"]'),
    ("B", 0.7, '["X", "W"]'),
]


@pytest.fixture
def seeds() -> List[SeedItem]:
    return [SeedItem("A", 10), SeedItem("B", 5)]


@pytest.fixture
def store() -> FakeRuleStore:
    return FakeRuleStore({"costs": list(SCENARIO_ROWS)})


@pytest.fixture
def selector(seeds) -> FakeTopSelector:
    return FakeTopSelector(seeds)


@pytest.fixture
def recommender(store, selector) -> RuleRecommender:
    return RuleRecommender(store, selector, RecommenderSettings(), rng=random.Random(7))
