# src/basket_recs/rules/decode.py
from __future__ import annotations

"""
decode.py

Purpose:
    Turn the stored `sets` column of a rule row into a tuple of item ids.

    Rule tables store consequent sets as JSON arrays, either in a text column
    (string/bytes) or a jsonb column (already decoded to a list by PostgREST).
"""

import json
from typing import Any, Tuple

from basket_recs.errors import MalformedRecord
from basket_recs.rules.schema import ItemId


def decode_consequents(raw: Any) -> Tuple[ItemId, ...]:
    """
    Returns:
        the consequent item ids in stored order.

    Raises:
        MalformedRecord if raw is not a JSON array of ints/strings.
    """
    value = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            value = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedRecord("Consequent set is not valid UTF-8", raw=raw) from exc
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise MalformedRecord("Consequent set is not valid JSON", raw=raw) from exc

    if not isinstance(value, (list, tuple)):
        raise MalformedRecord(f"Consequent set must be an array, got {type(value).__name__}", raw=raw)

    items = []
    for item in value:
        # bool is an int subclass but never a valid item id
        if isinstance(item, bool) or not isinstance(item, (int, str)):
            raise MalformedRecord(f"Invalid item id in consequent set: {item!r}", raw=raw)
        items.append(item)
    return tuple(items)
