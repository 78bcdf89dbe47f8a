"""Case-insensitive substring matching of a query against item text fields."""
from __future__ import annotations
from typing import Iterable, List, Optional

from app.models.items import Item

MATCH_FIELDS = ("name", "description", "category")


def normalize_query(query: Optional[str]) -> str:
    """Trim and lower-case. Returns "" for empty or whitespace-only input."""
    return (query or "").strip().lower()


def matches(query: str, item: Item) -> bool:
    """``query`` must already be normalized. Deleted items never match."""
    if item.deleted or not query:
        return False
    for field_name in MATCH_FIELDS:
        value = getattr(item, field_name)
        if value and query in value.lower():
            return True
    return False


def filter_items(query: str, items: Iterable[Item]) -> List[Item]:
    return [it for it in items if matches(query, it)]


__all__ = ["MATCH_FIELDS", "normalize_query", "matches", "filter_items"]
