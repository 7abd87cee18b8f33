"""
extension.py

ExtensionAugmenter re-runs a TopAggregator against the bound extension table
and unions the result into a primary-table result.

Extension tables are trained on a sparser signal, so their rules carry lower
confidences; the extension lookup uses min_confidence * scale (default 1/3).
"""
from __future__ import annotations

from typing import Optional

from basket_recs.config import EXTENSION_CONFIDENCE_SCALE, check_extension_scale
from basket_recs.logging_utils import get_logger
from basket_recs.recommendation.aggregator import TopAggregator
from basket_recs.recommendation.registry import MethodRegistry
from basket_recs.recommendation.retriever import check_confidence
from basket_recs.rules.schema import RecommendationSet

logger = get_logger("extension")


class ExtensionAugmenter:
    def __init__(
        self,
        aggregator: TopAggregator,
        registry: MethodRegistry,
        scale: float = EXTENSION_CONFIDENCE_SCALE,
    ) -> None:
        self.aggregator = aggregator
        self.registry = registry
        self.scale = check_extension_scale(scale)

    def scaled_confidence(self, min_confidence: float, scale: Optional[float] = None) -> float:
        base = check_confidence(min_confidence)
        factor = self.scale if scale is None else check_extension_scale(scale)
        return check_confidence(base * factor)

    def extension_only(
        self,
        top_amount: int,
        per_seed_limit: int,
        min_confidence: float,
        *,
        exclude_seeds: bool = False,
    ) -> RecommendationSet:
        """Aggregate from the bound extension table with min_confidence as given (no scaling)."""
        with self.registry.extension_as_primary():
            return self.aggregator.aggregate(top_amount, per_seed_limit, min_confidence, exclude_seeds=exclude_seeds)

    def augment(
        self,
        base: RecommendationSet,
        top_amount: int,
        per_seed_limit: int,
        min_confidence: float,
        scale: Optional[float] = None,
        *,
        exclude_seeds: bool = False,
    ) -> RecommendationSet:
        """
        Returns:
            base ∪ extension-table results at the scaled threshold. The primary
            binding is restored afterwards even when the lookup raises.
        """
        ext_confidence = self.scaled_confidence(min_confidence, scale)
        logger.debug(
            "Augmenting from %s with min_conf=%.4f (base %.4f)",
            self.registry.active_extension(),
            ext_confidence,
            float(min_confidence),
        )
        extra = self.extension_only(top_amount, per_seed_limit, ext_confidence, exclude_seeds=exclude_seeds)
        return base.union(extra)
