"""
retriever.py

RuleRetriever: consequents of one seed item's rules, as a RecommendationSet.

At most `max_rules` rule rows are read, but the number of unique items
returned is not bounded by it: two rules may share consequents (fewer
items) and one rule may carry several (more items).
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from basket_recs.errors import MalformedRecord
from basket_recs.logging_utils import get_logger
from basket_recs.recommendation.registry import MethodRegistry
from basket_recs.rules.decode import decode_consequents
from basket_recs.rules.schema import ItemId, RecommendationSet, Rule
from basket_recs.storage.rule_store import RuleStore

logger = get_logger("retriever")


def check_confidence(min_confidence: float) -> float:
    value = float(min_confidence)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"min_confidence must be within [0, 1], got {min_confidence!r}")
    return value


class RuleRetriever:
    def __init__(
        self,
        store: RuleStore,
        registry: MethodRegistry,
        decoder: Callable[[Any], Tuple[ItemId, ...]] = decode_consequents,
    ) -> None:
        self.store = store
        self.registry = registry
        self.decoder = decoder

    def retrieve(
        self,
        seed_item_id: ItemId,
        max_rules: int,
        min_confidence: float,
        *,
        table: Optional[str] = None,
    ) -> RecommendationSet:
        """
        Query the active primary table (or `table`) for the seed's rules with
        confidence >= min_confidence, best first, and union their consequents.

        Rows whose consequent set cannot be decoded are skipped and counted in
        the result's `skipped_rows`. Store failures propagate.
        """
        if int(max_rules) < 1:
            raise ValueError(f"max_rules must be >= 1, got {max_rules!r}")
        min_confidence = check_confidence(min_confidence)
        table = table or self.registry.active_primary()

        rows = self.store.query(table, seed_item_id, min_confidence, int(max_rules))

        out = RecommendationSet()
        for row in rows:
            try:
                rule = self._to_rule(row)
            except MalformedRecord as exc:
                out.skipped_rows += 1
                logger.warning(
                    "Skipping malformed rule row; table=%s seed=%s err=%s",
                    table,
                    seed_item_id,
                    exc,
                    extra={
                        "invoking_func": "retrieve",
                        "invoking_purpose": "Collect consequents for one seed item",
                        "next_step": "Continue with the next row",
                        "resolution": "Re-export the rule table with JSON array `sets`",
                    },
                )
                continue
            out.update(rule.consequents)
        return out

    def _to_rule(self, row: Dict[str, Any]) -> Rule:
        if not isinstance(row, dict) or "sets" not in row:
            raise MalformedRecord("Rule row has no `sets` column", raw=row)
        if row.get("cost") is None:
            raise MalformedRecord("Rule row has no `cost` value", raw=row)
        try:
            confidence = float(row["cost"])
        except (TypeError, ValueError) as exc:
            raise MalformedRecord(f"Rule confidence is not a number: {row.get('cost')!r}", raw=row) from exc
        return Rule(seed_item_id=row.get("main"), confidence=confidence, consequents=self.decoder(row["sets"]))
