"""
top_selector.py

The top table ranks items by popularity (e.g. purchase count):
    item_id     item id
    popularity  integer
"""
from __future__ import annotations

from typing import List, Protocol

import httpx
from supabase import Client

from basket_recs.config import DEFAULT_TOP_TABLE
from basket_recs.errors import StoreTimeout, StoreUnavailable
from basket_recs.logging_utils import get_logger
from basket_recs.rules.schema import SeedItem

logger = get_logger("top_selector")


class TopSelector(Protocol):
    def top(self, count: int) -> List[SeedItem]:
        """The `count` most popular items, most popular first."""
        ...


class SupabaseTopSelector:
    def __init__(self, client: Client, table: str = DEFAULT_TOP_TABLE) -> None:
        self.client = client
        self.table = table

    def top(self, count: int) -> List[SeedItem]:
        try:
            res = (
                self.client.table(self.table)
                .select("item_id,popularity")
                .order("popularity", desc=True)
                .order("item_id")
                .limit(int(count))
                .execute()
            )
        except httpx.TimeoutException as exc:
            logger.error(
                "Top query timed out; table=%s",
                self.table,
                extra={
                    "invoking_func": "top",
                    "invoking_purpose": "Fetch the most popular seed items",
                    "next_step": "Raise StoreTimeout to the caller",
                    "resolution": "Retry later or raise the client timeout",
                },
            )
            raise StoreTimeout(f"Top query on {self.table!r} timed out", table=self.table) from exc
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Top query failed; table=%s err=%s",
                self.table,
                exc,
                extra={
                    "invoking_func": "top",
                    "invoking_purpose": "Fetch the most popular seed items",
                    "next_step": "Raise StoreUnavailable to the caller",
                    "resolution": "Check TOP_TABLE and Supabase credentials",
                },
            )
            raise StoreUnavailable(f"Top query on {self.table!r} failed: {exc}", table=self.table) from exc

        seeds: List[SeedItem] = []
        seen = set()
        for row in res.data or []:
            try:
                item_id = row["item_id"]
                popularity = int(row.get("popularity") or 0)
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreUnavailable(f"Malformed row in {self.table!r}: {row!r}", table=self.table) from exc
            # item ids are unique within one ranking
            if item_id in seen:
                continue
            seen.add(item_id)
            seeds.append(SeedItem(item_id=item_id, popularity=popularity))
        return seeds
