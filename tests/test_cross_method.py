"""CrossMethodAggregator tests."""

from __future__ import annotations

import logging

import pytest

from conftest import FakeRuleStore, FakeTopSelector
from basket_recs.config import RecommenderSettings
from basket_recs.errors import StoreUnavailable
from basket_recs.recommendation.aggregator import TopAggregator
from basket_recs.recommendation.cross_method import CrossMethodAggregator
from basket_recs.recommendation.extension import ExtensionAugmenter
from basket_recs.recommendation.registry import MethodRegistry
from basket_recs.recommendation.retriever import RuleRetriever
from basket_recs.rules.schema import MiningMethod, SeedItem, TableBinding

TABLES = {
    "costs": [("A", 0.9, '["fp", "shared"]')],
    "costs2": [("A", 0.9, '["ap", "shared", "A"]')],
    "costs3": [("A", 0.9, '["ec"]')],
    "costsExt": [("A", 0.25, '["fp_ext"]')],
    "costs2ext": [("A", 0.25, '["ap_ext"]')],
    "costs3ext": [("A", 0.1, '["ec_ext"]')],
}


def build(store, restore_binding=False):
    registry = MethodRegistry(RecommenderSettings().tables)
    aggregator = TopAggregator(FakeTopSelector([SeedItem("A", 1)]), RuleRetriever(store, registry))
    augmenter = ExtensionAugmenter(aggregator, registry)
    return registry, CrossMethodAggregator(registry, aggregator, augmenter, restore_binding=restore_binding)


def test_fuses_every_primary_table() -> None:
    store = FakeRuleStore(dict(TABLES))
    _, cross = build(store)
    out = cross.aggregate_across_methods(1, 20, 0.6)
    assert out.to_list() == ["fp", "shared", "ap", "A", "ec"]
    assert store.tables_queried() == ["costs", "costs2", "costs3"]


def test_fuses_with_extensions_and_excludes_seeds() -> None:
    store = FakeRuleStore(dict(TABLES))
    _, cross = build(store)
    out = cross.aggregate_across_methods(1, 20, 0.6, include_extension=True, exclude_seeds=True)
    # ext threshold is 0.2, so ec_ext (0.1) is filtered
    assert out == {"fp", "shared", "fp_ext", "ap", "ap_ext", "ec"}
    assert store.tables_queried() == ["costs", "costsExt", "costs2", "costs2ext", "costs3", "costs3ext"]


@pytest.mark.parametrize("start", list(MiningMethod))
def test_binding_left_at_last_method(start) -> None:
    registry, cross = build(FakeRuleStore(dict(TABLES)))
    registry.bind(start)
    cross.aggregate_across_methods(1, 20, 0.6)
    assert registry.active_primary() == "costs3"
    assert registry.active_extension() == "costs3ext"


def test_restore_binding_option() -> None:
    registry, cross = build(FakeRuleStore(dict(TABLES)), restore_binding=True)
    registry.bind(MiningMethod.APRIORI)
    cross.aggregate_across_methods(1, 20, 0.6, include_extension=True)
    assert registry.binding == TableBinding("costs2", "costs2ext")


def test_failure_in_one_method_fails_the_call() -> None:
    store = FakeRuleStore(dict(TABLES))
    store.fail_on = "costs2"
    _, cross = build(store)
    with pytest.raises(StoreUnavailable):
        cross.aggregate_across_methods(1, 20, 0.6)


def test_fusion_log_names_binding_in_message(caplog) -> None:
    _, cross = build(FakeRuleStore(dict(TABLES)))
    with caplog.at_level(logging.INFO):
        cross.aggregate_across_methods(1, 20, 0.6)
    records = [r for r in caplog.records if r.getMessage().startswith("Fused")]
    assert len(records) == 1
    assert "binding=costs3" in records[0].getMessage()
    assert records[0].resolution == ""
