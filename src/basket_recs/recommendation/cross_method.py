"""
cross_method.py

CrossMethodAggregator fuses recommendations from the FPGrowth, Apriori and
Eclat rule tables.

Each method is bound (primary + extension together) in enumeration order,
aggregated, then everything is unioned. Afterwards the registry stays bound
to the last method (Eclat) unless restore_binding=True.
"""
from __future__ import annotations

from basket_recs.logging_utils import get_logger
from basket_recs.recommendation.aggregator import TopAggregator
from basket_recs.recommendation.extension import ExtensionAugmenter
from basket_recs.recommendation.registry import MethodRegistry
from basket_recs.rules.schema import MiningMethod, RecommendationSet

logger = get_logger("cross_method")


class CrossMethodAggregator:
    def __init__(
        self,
        registry: MethodRegistry,
        aggregator: TopAggregator,
        augmenter: ExtensionAugmenter,
        *,
        restore_binding: bool = False,
    ) -> None:
        self.registry = registry
        self.aggregator = aggregator
        self.augmenter = augmenter
        self.restore_binding = restore_binding

    def aggregate_across_methods(
        self,
        top_amount: int,
        per_seed_limit: int,
        min_confidence: float,
        include_extension: bool = False,
        exclude_seeds: bool = False,
    ) -> RecommendationSet:
        saved = self.registry.binding
        result = RecommendationSet()
        try:
            for method in MiningMethod:
                self.registry.bind_both(method)
                found = self.aggregator.aggregate(
                    top_amount, per_seed_limit, min_confidence, exclude_seeds=exclude_seeds
                )
                if include_extension:
                    found = self.augmenter.augment(
                        found, top_amount, per_seed_limit, min_confidence, exclude_seeds=exclude_seeds
                    )
                logger.debug("%s contributed %d items", method.name, len(found))
                result.update(found)
        finally:
            if self.restore_binding:
                self.registry.restore(saved)

        logger.info(
            "Fused %d items across %d mining methods (extension=%s exclude_seeds=%s binding=%s)",
            len(result),
            len(MiningMethod),
            include_extension,
            exclude_seeds,
            self.registry.active_primary(),
            extra={
                "invoking_func": "aggregate_across_methods",
                "invoking_purpose": "Fuse recommendations from every rule table",
                "next_step": "Return fused set",
                "resolution": "",
            },
        )
        return result
