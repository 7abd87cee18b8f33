"""
recommender.py

Public recommendation API over precomputed association-rule tables.

Every recommend_* call returns a RecommendationSet: unique item ids in
first-seen order. Pass it to limit() to get a randomly truncated list.

Variants:
  recommend_by_top                          primary table, seeds may appear
  recommend_by_top_without_top              primary table, seeds removed
  recommend_by_top_ext                      extension table only
  recommend_by_top_without_top_ext          extension table only, seeds removed
  recommend_by_top_plus_ext                 primary + extension at min_confidence / 3
  recommend_by_top_without_top_plus_ext     same, seeds removed
  recommend_by_top_from_all_tables          primary tables of every mining method
  recommend_by_top_from_all_tables_without_top
  recommend_by_top_from_all_tables_plus_ext primary + extension of every method, seeds removed

Note:
  - The active table binding is per-instance state. The from_all_tables
    variants leave it bound to the last mining method (Eclat).
  - Do not share one instance between concurrent requests; call session()
    to get an instance with its own binding.
"""
from __future__ import annotations

import random
from typing import Iterable, List, Optional

from supabase import Client

from basket_recs.config import (
    DEFAULT_PER_SEED_LIMIT,
    DEFAULT_RULE_LIMIT,
    DEFAULT_SAMPLE_LIMIT,
    MIN_CONFIDENCE_ALL_TABLES,
    MIN_CONFIDENCE_EXT,
    MIN_CONFIDENCE_PLUS_EXT,
    MIN_CONFIDENCE_TOP,
    MIN_CONFIDENCE_VALUE,
    RecommenderSettings,
)
from basket_recs.logging_utils import get_logger
from basket_recs.recommendation.aggregator import TopAggregator
from basket_recs.recommendation.cross_method import CrossMethodAggregator
from basket_recs.recommendation.extension import ExtensionAugmenter
from basket_recs.recommendation.registry import MethodLike, MethodRegistry
from basket_recs.recommendation.retriever import RuleRetriever
from basket_recs.recommendation.sampler import DiversitySampler
from basket_recs.rules.schema import ItemId, RecommendationSet
from basket_recs.storage.rule_store import RuleStore, SupabaseRuleStore
from basket_recs.storage.top_selector import SupabaseTopSelector, TopSelector

logger = get_logger("recommender")


class RuleRecommender:
    def __init__(
        self,
        store: RuleStore,
        selector: TopSelector,
        settings: Optional[RecommenderSettings] = None,
        *,
        rng: Optional[random.Random] = None,
        restore_binding: bool = False,
        registry: Optional[MethodRegistry] = None,
    ) -> None:
        self.store = store
        self.selector = selector
        self.settings = settings or RecommenderSettings()
        self.restore_binding = restore_binding

        self.registry = registry or MethodRegistry(self.settings.tables, self.settings.default_method)
        self.retriever = RuleRetriever(store, self.registry)
        self.aggregator = TopAggregator(selector, self.retriever)
        self.augmenter = ExtensionAugmenter(self.aggregator, self.registry, self.settings.extension_confidence_scale)
        self.cross = CrossMethodAggregator(
            self.registry, self.aggregator, self.augmenter, restore_binding=restore_binding
        )
        self.sampler = DiversitySampler(rng)

    @classmethod
    def from_client(cls, client: Client, settings: Optional[RecommenderSettings] = None, **kwargs) -> "RuleRecommender":
        settings = settings or RecommenderSettings.from_env()
        return cls(
            SupabaseRuleStore(client),
            SupabaseTopSelector(client, settings.top_table),
            settings,
            **kwargs,
        )

    def session(self, *, rng: Optional[random.Random] = None) -> "RuleRecommender":
        """New recommender sharing store/selector/settings but owning its own table binding."""
        return RuleRecommender(
            self.store,
            self.selector,
            self.settings,
            rng=rng,
            restore_binding=self.restore_binding,
            registry=self.registry.copy(),
        )

    # ------------------------------------------------------------------
    # Single seed
    # ------------------------------------------------------------------
    def recommend_by_value(
        self,
        item_id: ItemId,
        per_value_limit: int = DEFAULT_RULE_LIMIT,
        min_confidence: float = MIN_CONFIDENCE_VALUE,
    ) -> RecommendationSet:
        """Unique consequents of up to `per_value_limit` rules for one item."""
        return self.retriever.retrieve(item_id, per_value_limit, min_confidence)

    # ------------------------------------------------------------------
    # Bound primary / extension table
    # ------------------------------------------------------------------
    def recommend_by_top(
        self, top_amount: int, per_value_limit: int = DEFAULT_PER_SEED_LIMIT, min_confidence: float = MIN_CONFIDENCE_TOP
    ) -> RecommendationSet:
        return self.aggregator.aggregate_including_seeds(top_amount, per_value_limit, min_confidence)

    def recommend_by_top_without_top(
        self, top_amount: int, per_value_limit: int = DEFAULT_PER_SEED_LIMIT, min_confidence: float = MIN_CONFIDENCE_TOP
    ) -> RecommendationSet:
        return self.aggregator.aggregate_excluding_seeds(top_amount, per_value_limit, min_confidence)

    def recommend_by_top_ext(
        self, top_amount: int, per_value_limit: int = DEFAULT_PER_SEED_LIMIT, min_confidence: float = MIN_CONFIDENCE_EXT
    ) -> RecommendationSet:
        return self.augmenter.extension_only(top_amount, per_value_limit, min_confidence)

    def recommend_by_top_without_top_ext(
        self, top_amount: int, per_value_limit: int = DEFAULT_PER_SEED_LIMIT, min_confidence: float = MIN_CONFIDENCE_EXT
    ) -> RecommendationSet:
        return self.augmenter.extension_only(top_amount, per_value_limit, min_confidence, exclude_seeds=True)

    def recommend_by_top_plus_ext(
        self,
        top_amount: int,
        per_value_limit: int = DEFAULT_PER_SEED_LIMIT,
        min_confidence: float = MIN_CONFIDENCE_PLUS_EXT,
    ) -> RecommendationSet:
        base = self.aggregator.aggregate_including_seeds(top_amount, per_value_limit, min_confidence)
        return self.augmenter.augment(base, top_amount, per_value_limit, min_confidence)

    def recommend_by_top_without_top_plus_ext(
        self,
        top_amount: int,
        per_value_limit: int = DEFAULT_PER_SEED_LIMIT,
        min_confidence: float = MIN_CONFIDENCE_PLUS_EXT,
    ) -> RecommendationSet:
        base = self.aggregator.aggregate_excluding_seeds(top_amount, per_value_limit, min_confidence)
        return self.augmenter.augment(base, top_amount, per_value_limit, min_confidence, exclude_seeds=True)

    # ------------------------------------------------------------------
    # Every mining method
    # ------------------------------------------------------------------
    def recommend_by_top_from_all_tables(
        self,
        top_amount: int,
        per_value_limit: int = DEFAULT_PER_SEED_LIMIT,
        min_confidence: float = MIN_CONFIDENCE_ALL_TABLES,
    ) -> RecommendationSet:
        return self.cross.aggregate_across_methods(top_amount, per_value_limit, min_confidence)

    def recommend_by_top_from_all_tables_without_top(
        self,
        top_amount: int,
        per_value_limit: int = DEFAULT_PER_SEED_LIMIT,
        min_confidence: float = MIN_CONFIDENCE_ALL_TABLES,
    ) -> RecommendationSet:
        return self.cross.aggregate_across_methods(top_amount, per_value_limit, min_confidence, exclude_seeds=True)

    def recommend_by_top_from_all_tables_plus_ext(
        self,
        top_amount: int,
        per_value_limit: int = DEFAULT_PER_SEED_LIMIT,
        min_confidence: float = MIN_CONFIDENCE_ALL_TABLES,
    ) -> RecommendationSet:
        """Primary + scaled extension tables of every method; seed items are removed."""
        return self.cross.aggregate_across_methods(
            top_amount, per_value_limit, min_confidence, include_extension=True, exclude_seeds=True
        )

    # ------------------------------------------------------------------
    # Output + table switching
    # ------------------------------------------------------------------
    def limit(self, recommendations: Iterable[ItemId], max_size: int = DEFAULT_SAMPLE_LIMIT) -> List[ItemId]:
        return self.sampler.sample(recommendations, max_size)

    def switch_table(self, method: MethodLike) -> None:
        """Point primary lookups at `method`'s table; the extension table is unchanged."""
        self.registry.bind_primary(method)

    def switch_ext_table(self, method: MethodLike) -> None:
        self.registry.bind_extension(method)

    def switch_all_tables(self, method: MethodLike) -> None:
        self.registry.bind_both(method)
        logger.info(
            "Switched rule tables to %s / %s",
            self.registry.active_primary(),
            self.registry.active_extension(),
            extra={
                "invoking_func": "switch_all_tables",
                "invoking_purpose": "Select the mining method to recommend from",
                "next_step": "Subsequent recommend_* calls read these tables",
                "resolution": "",
            },
        )

    def active_primary(self) -> str:
        return self.registry.active_primary()

    def active_extension(self) -> str:
        return self.registry.active_extension()
