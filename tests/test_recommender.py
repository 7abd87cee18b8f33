"""RuleRecommender facade tests: every public variant plus session isolation."""

from __future__ import annotations

import pytest

from conftest import FakeRuleStore, FakeTopSelector
from basket_recs.config import (
    DEFAULT_PER_SEED_LIMIT,
    MIN_CONFIDENCE_EXT,
    MIN_CONFIDENCE_PLUS_EXT,
    MIN_CONFIDENCE_TOP,
    RecommenderSettings,
)
from basket_recs.errors import UnknownMethod
from basket_recs.recommendation import RuleRecommender
from basket_recs.rules.schema import SeedItem

TABLES = {
    "costs": [("A", 0.8, '["X", "Y"]'), ("A", 0.5, '["Z"]'), ("B", 0.7, '["X", "W", "A"]')],
    "costsExt": [("A", 0.15, '["E1"]'), ("B", 0.09, '["E2", "B"]')],
    "costs2": [("A", 0.9, '["P2"]')],
    "costs2ext": [("B", 0.3, '["P2E"]')],
    "costs3": [("B", 0.95, '["P3", "B"]')],
    "costs3ext": [],
}


@pytest.fixture
def rec() -> RuleRecommender:
    store = FakeRuleStore(dict(TABLES))
    selector = FakeTopSelector([SeedItem("A", 10), SeedItem("B", 5)])
    return RuleRecommender(store, selector, RecommenderSettings())


def test_recommend_by_top(rec) -> None:
    assert rec.recommend_by_top(2).to_list() == ["X", "Y", "W", "A"]
    assert rec.store.calls[0] == ("costs", "A", MIN_CONFIDENCE_TOP, DEFAULT_PER_SEED_LIMIT)


def test_recommend_by_top_without_top(rec) -> None:
    assert rec.recommend_by_top_without_top(2).to_list() == ["X", "Y", "W"]


def test_recommend_by_top_ext(rec) -> None:
    assert rec.recommend_by_top_ext(2).to_list() == ["E1"]
    assert {call[2] for call in rec.store.calls} == {MIN_CONFIDENCE_EXT}
    assert rec.active_primary() == "costs"


def test_recommend_by_top_without_top_ext(rec) -> None:
    assert rec.recommend_by_top_without_top_ext(2, min_confidence=0.05).to_list() == ["E1", "E2"]


def test_recommend_by_top_plus_ext(rec) -> None:
    # primary at 0.3, extension at 0.1
    assert rec.recommend_by_top_plus_ext(2).to_list() == ["X", "Y", "Z", "W", "A", "E1"]
    ext_thresholds = [call[2] for call in rec.store.calls if call[0] == "costsExt"]
    assert ext_thresholds == [pytest.approx(MIN_CONFIDENCE_PLUS_EXT / 3)] * 2


def test_recommend_by_top_without_top_plus_ext(rec) -> None:
    assert rec.recommend_by_top_without_top_plus_ext(2, min_confidence=0.24).to_list() == ["X", "Y", "Z", "W", "E1", "E2"]


def test_recommend_by_top_from_all_tables(rec) -> None:
    out = rec.recommend_by_top_from_all_tables(2)
    assert out.to_list() == ["X", "Y", "W", "A", "P2", "P3", "B"]
    assert rec.active_primary() == "costs3"
    assert rec.active_extension() == "costs3ext"


def test_recommend_by_top_from_all_tables_without_top(rec) -> None:
    assert rec.recommend_by_top_from_all_tables_without_top(2) == {"X", "Y", "W", "P2", "P3"}


def test_recommend_by_top_from_all_tables_plus_ext(rec) -> None:
    out = rec.recommend_by_top_from_all_tables_plus_ext(2)
    # ext threshold 0.2: costsExt rows filtered, costs2ext kept; seeds removed
    assert out == {"X", "Y", "W", "P2", "P2E", "P3"}
    assert rec.active_primary() == "costs3"


def test_recommend_by_value(rec) -> None:
    assert rec.recommend_by_value("A", min_confidence=0.4).to_list() == ["X", "Y", "Z"]


def test_switch_tables(rec) -> None:
    rec.switch_table("apriori")
    assert (rec.active_primary(), rec.active_extension()) == ("costs2", "costsExt")
    rec.switch_ext_table("eclat")
    assert rec.active_extension() == "costs3ext"
    rec.switch_all_tables("fpgrowth")
    assert (rec.active_primary(), rec.active_extension()) == ("costs", "costsExt")
    with pytest.raises(UnknownMethod):
        rec.switch_all_tables("lightgcn")


def test_limit(rec) -> None:
    found = rec.recommend_by_top(2)
    picked = rec.limit(found, 2)
    assert len(picked) == 2
    assert set(picked) <= set(found)
    assert rec.limit(found, 0) and len(rec.limit(found, 0)) == 1


def test_session_has_own_binding(rec) -> None:
    per_request = rec.session()
    per_request.recommend_by_top_from_all_tables(2)
    assert per_request.active_primary() == "costs3"
    assert rec.active_primary() == "costs"
    assert per_request.store is rec.store


def test_default_method_from_settings() -> None:
    settings = RecommenderSettings(default_method="apriori")  # type: ignore[arg-type]
    rec = RuleRecommender(FakeRuleStore({}), FakeTopSelector([]), settings)
    assert rec.active_primary() == "costs2"
