"""Deterministic ordering of search results.

Tie-break chain, each key consulted only when every earlier key is equal:
  1. distance ascending (both present; gaps within the deadband fall through)
  2. results with a distance before results without
  3. verified before unverified
  4. fewer reports first
  5. among verified items, most recently verified first
  6. item name, case-insensitive
Item id closes the chain so the order is total.

Pairwise deadband comparison is not transitive (1.000 ~ 1.001 ~ 1.002 but
1.000 < 1.002), so distances are grouped instead: each group starts at the
nearest ungrouped result and takes every result within the deadband of that
anchor. Groups are ordered by anchor, results inside a group by keys 3-6.
Any result therefore precedes another only if its distance is at most the
other's plus the deadband.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, List, Tuple

from app.models.items import Item, SearchResult

DEFAULT_RESULT_LIMIT = 20
DEFAULT_DEADBAND_KM = 0.001

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _verified_ts(item: Item) -> float:
    ts = item.verified_at
    if ts is None:
        return 0.0
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH).total_seconds()


def item_key(item: Item) -> Tuple:
    """Keys 3-6 plus the id tie-break; shared with distance-free listings."""
    # recency only separates verified items; unverified ones fall through to name
    recency = -_verified_ts(item) if item.verified else 0.0
    return (not item.verified, item.report_count, recency, item.name.casefold(), item.id)


def _group_by_deadband(located: List[SearchResult], deadband_km: float) -> List[List[SearchResult]]:
    groups: List[List[SearchResult]] = []
    anchor = None
    for r in sorted(located, key=lambda r: (r.distance, item_key(r.item))):
        if anchor is None or r.distance - anchor > deadband_km:
            anchor = r.distance
            groups.append([])
        groups[-1].append(r)
    return groups


def rank(
    results: Iterable[SearchResult],
    deadband_km: float = DEFAULT_DEADBAND_KM,
) -> List[SearchResult]:
    results = list(results)
    located = [r for r in results if r.distance is not None]
    unlocated = [r for r in results if r.distance is None]

    ordered: List[SearchResult] = []
    for group in _group_by_deadband(located, deadband_km):
        ordered.extend(sorted(group, key=lambda r: item_key(r.item)))
    ordered.extend(sorted(unlocated, key=lambda r: item_key(r.item)))
    return ordered


def rank_and_truncate(
    results: Iterable[SearchResult],
    limit: int = DEFAULT_RESULT_LIMIT,
    deadband_km: float = DEFAULT_DEADBAND_KM,
) -> List[SearchResult]:
    return rank(results, deadband_km)[:max(limit, 0)]


def rank_items(items: Iterable[Item]) -> List[Item]:
    return sorted(items, key=item_key)


__all__ = [
    "DEFAULT_RESULT_LIMIT",
    "DEFAULT_DEADBAND_KM",
    "item_key",
    "rank",
    "rank_and_truncate",
    "rank_items",
]
