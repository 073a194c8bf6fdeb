"""Reconcile bare-list and enveloped list responses into one page shape."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jul_client.core.mappers import Mapper, map_array
from jul_client.models.common import PaginatedResponse


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def normalize_paginated[T](value: Any, map_item: Mapper[T]) -> PaginatedResponse[T]:
    """Normalize a list response into a :class:`PaginatedResponse`.

    A bare list becomes a single page covering every item. An envelope keeps
    its numeric ``total``/``limit``/``offset`` and falls back to the item
    count (or ``0`` for the offset) when a value is missing or not a number.
    """
    if isinstance(value, list):
        items = map_array(value, map_item)
        return PaginatedResponse(items=items, total=len(items), limit=len(items), offset=0)

    envelope = value if isinstance(value, Mapping) else {}
    items = map_array(envelope.get("items"), map_item)
    total = envelope.get("total")
    limit = envelope.get("limit")
    offset = envelope.get("offset")
    return PaginatedResponse(
        items=items,
        total=total if _is_number(total) else len(items),
        limit=limit if _is_number(limit) else len(items),
        offset=offset if _is_number(offset) else 0,
    )
