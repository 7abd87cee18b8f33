"""
aggregator.py

TopAggregator unions RuleRetriever results over the top seed items.

Two modes:
  - including seeds: anything a rule recommends is kept, seeds included.
  - excluding seeds: a candidate equal to ANY seed of this call is dropped,
    not only the seed whose rule produced it.

Seeds are processed in the selector's order and rows in the store's order,
so for the same seeds and store contents the output (and its order) is
deterministic. A failure on any seed aborts the call; no partial set is
returned.
"""
from __future__ import annotations

from typing import List, Optional

from basket_recs.logging_utils import get_logger
from basket_recs.recommendation.retriever import RuleRetriever
from basket_recs.rules.schema import RecommendationSet, SeedItem
from basket_recs.storage.top_selector import TopSelector

logger = get_logger("aggregator")


class TopAggregator:
    def __init__(self, selector: TopSelector, retriever: RuleRetriever) -> None:
        self.selector = selector
        self.retriever = retriever

    def seeds(self, top_amount: int) -> List[SeedItem]:
        if int(top_amount) < 1:
            raise ValueError(f"top_amount must be >= 1, got {top_amount!r}")
        return list(self.selector.top(int(top_amount)))

    def aggregate(
        self,
        top_amount: int,
        per_seed_limit: int,
        min_confidence: float,
        *,
        exclude_seeds: bool = False,
        table: Optional[str] = None,
    ) -> RecommendationSet:
        seeds = self.seeds(top_amount)
        seed_ids = {seed.item_id for seed in seeds}

        result = RecommendationSet()
        dropped = 0
        for seed in seeds:
            found = self.retriever.retrieve(seed.item_id, per_seed_limit, min_confidence, table=table)
            result.skipped_rows += found.skipped_rows
            for item in found:
                if exclude_seeds and item in seed_ids:
                    dropped += 1
                    continue
                result.add(item)

        logger.debug(
            "Aggregated %d items from %d seeds (table=%s min_conf=%.3f dropped_seeds=%d skipped_rows=%d)",
            len(result),
            len(seeds),
            table or self.retriever.registry.active_primary(),
            float(min_confidence),
            dropped,
            result.skipped_rows,
        )
        return result

    def aggregate_including_seeds(self, top_amount: int, per_seed_limit: int, min_confidence: float) -> RecommendationSet:
        return self.aggregate(top_amount, per_seed_limit, min_confidence, exclude_seeds=False)

    def aggregate_excluding_seeds(self, top_amount: int, per_seed_limit: int, min_confidence: float) -> RecommendationSet:
        return self.aggregate(top_amount, per_seed_limit, min_confidence, exclude_seeds=True)
