# src/basket_recs/rules/schema.py
from __future__ import annotations

"""
schema.py

Purpose:
    Shared types passed between the storage adapters and the recommendation
    layer. Nothing in this module talks to Supabase.

Objects:
    - SeedItem          (one row of the top-items ranking)
    - Rule              (one decoded association rule)
    - RecommendationSet (ordered, duplicate-free set of item ids)
    - MiningMethod      (FPGrowth / Apriori / Eclat)
    - TableBinding      (primary + extension table pair)

Item ids are compared with ==, so ids coming from the top table and ids
decoded from consequent sets must share a type (both int or both str).
"""

import enum
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from basket_recs.errors import UnknownMethod

ItemId = Union[int, str]


@dataclass(frozen=True)
class SeedItem:
    """One entry of the top ranking, most popular first."""

    item_id: ItemId
    popularity: int


@dataclass(frozen=True)
class Rule:
    """A mined rule: seed item -> consequent items, with confidence in [0, 1]."""

    seed_item_id: ItemId
    confidence: float
    consequents: Tuple[ItemId, ...]


class RecommendationSet:
    """
    Insertion-ordered set of item ids.

    `skipped_rows` counts stored rule rows that could not be decoded while
    building this set; unions add the counts up so the caller can tell a
    clean empty result from one that lost rows.
    """

    def __init__(self, items: Iterable[ItemId] = (), *, skipped_rows: int = 0) -> None:
        self._items: Dict[ItemId, None] = dict.fromkeys(items)
        self.skipped_rows = skipped_rows

    def add(self, item: ItemId) -> bool:
        """Insert item; return False if it was already present."""
        if item in self._items:
            return False
        self._items[item] = None
        return True

    def update(self, other: Iterable[ItemId]) -> None:
        for item in other:
            self.add(item)
        if isinstance(other, RecommendationSet):
            self.skipped_rows += other.skipped_rows

    def union(self, *others: RecommendationSet) -> RecommendationSet:
        out = RecommendationSet(self, skipped_rows=self.skipped_rows)
        for other in others:
            out.update(other)
        return out

    def to_list(self) -> List[ItemId]:
        return list(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[ItemId]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RecommendationSet):
            return set(self._items) == set(other._items)
        if isinstance(other, (set, frozenset)):
            return set(self._items) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"RecommendationSet({self.to_list()!r}, skipped_rows={self.skipped_rows})"


class MiningMethod(enum.Enum):
    """Offline algorithm that produced a rule table. Order is the fusion order."""

    FPGROWTH = "fpgrowth"
    APRIORI = "apriori"
    ECLAT = "eclat"

    @classmethod
    def parse(cls, value: Union[str, "MiningMethod"]) -> "MiningMethod":
        """Accept a member or its name/value in any case; anything else is UnknownMethod."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        raise UnknownMethod(value)


@dataclass(frozen=True)
class TableBinding:
    """Pair of rule tables a retrieval reads from."""

    primary: str
    extension: str
