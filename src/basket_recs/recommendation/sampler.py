"""
sampler.py

DiversitySampler cuts an oversized recommendation set down to `limit` items
chosen uniformly at random, so repeated calls do not always surface the head
of the set. Pass a seeded random.Random for reproducible output.
"""
from __future__ import annotations

import random
from typing import Iterable, List, Optional

from basket_recs.rules.schema import ItemId


class DiversitySampler:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def sample(self, items: Iterable[ItemId], limit: int) -> List[ItemId]:
        """
        Returns:
            every item when there are at most max(limit, 1) of them, otherwise
            the first `limit` items of a uniform random permutation.
        """
        pool = list(items)
        if limit <= 0:
            limit = 1
        if len(pool) <= 1 or len(pool) <= limit:
            return pool
        self.rng.shuffle(pool)
        return pool[:limit]
