"""
rule_store.py

Rule tables hold one row per mined rule:
    id    bigint   stable tie-break key
    main  item id  seed (antecedent) item
    cost  float    confidence in [0, 1]
    sets  json     consequent item ids

The store only fetches rows; decoding `sets` is the retriever's job so a
single bad row can be skipped without failing the whole query.
"""
from __future__ import annotations

from typing import Any, Dict, List, Protocol

import httpx
from supabase import Client

from basket_recs.errors import StoreTimeout, StoreUnavailable
from basket_recs.logging_utils import get_logger
from basket_recs.rules.schema import ItemId

logger = get_logger("rule_store")

RULE_COLUMNS = "id,main,cost,sets"


class RuleStore(Protocol):
    def query(self, table: str, seed_item_id: ItemId, min_confidence: float, max_rows: int) -> List[Dict[str, Any]]:
        """
        Rows of `table` with main == seed_item_id and cost >= min_confidence,
        ordered by cost desc then id asc, at most max_rows of them.

        Raises StoreUnavailable (or StoreTimeout) on failure.
        """
        ...


class SupabaseRuleStore:
    def __init__(self, client: Client) -> None:
        self.client = client

    def query(self, table: str, seed_item_id: ItemId, min_confidence: float, max_rows: int) -> List[Dict[str, Any]]:
        try:
            res = (
                self.client.table(table)
                .select(RULE_COLUMNS)
                .eq("main", seed_item_id)
                .gte("cost", float(min_confidence))
                .order("cost", desc=True)
                .order("id")
                .limit(int(max_rows))
                .execute()
            )
        except httpx.TimeoutException as exc:
            logger.error(
                "Rule query timed out; table=%s seed=%s",
                table,
                seed_item_id,
                extra={
                    "invoking_func": "query",
                    "invoking_purpose": "Fetch rules for one seed item",
                    "next_step": "Raise StoreTimeout to the caller",
                    "resolution": "Retry later or raise the client timeout",
                },
            )
            raise StoreTimeout(f"Rule query on {table!r} timed out", table=table) from exc
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Rule query failed; table=%s seed=%s err=%s",
                table,
                seed_item_id,
                exc,
                extra={
                    "invoking_func": "query",
                    "invoking_purpose": "Fetch rules for one seed item",
                    "next_step": "Raise StoreUnavailable to the caller",
                    "resolution": "Check Supabase URL/key and that the table exists",
                },
            )
            raise StoreUnavailable(f"Rule query on {table!r} failed: {exc}", table=table) from exc

        rows = res.data
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise StoreUnavailable(f"Rule query on {table!r} returned {type(rows).__name__}, expected rows", table=table)
        return rows
