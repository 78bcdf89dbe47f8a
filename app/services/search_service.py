"""Item discovery across all approved stores.

Pipeline per query:
    normalize query -> fetch items + stores concurrently -> build StoreTable
    -> text match -> join with stores (+ distance) -> rank -> truncate

Each call owns its StoreTable and result list; nothing is shared between
queries and no source document is modified.
"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from time import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from config import settings
from app.models.items import Item, Location, SearchResult
from app.scripts.logging_config import get_logger, log_search_summary
from . import ranker, text_matcher
from .catalog_store import CatalogSource
from .errors import DataAccessFailure
from .result_assembler import assemble
from .store_reconciler import DEFAULT_STORE_ID_PREFIXES, build_store_table

logger = get_logger("search_service")


@dataclass(frozen=True)
class SearchOptions:
    limit: int = ranker.DEFAULT_RESULT_LIMIT
    deadband_km: float = ranker.DEFAULT_DEADBAND_KM
    store_id_prefixes: Sequence[str] = field(default=DEFAULT_STORE_ID_PREFIXES)

    @classmethod
    def from_settings(cls) -> "SearchOptions":
        return cls(
            limit=settings.SEARCH_RESULT_LIMIT,
            deadband_km=settings.DISTANCE_DEADBAND_KM,
            store_id_prefixes=tuple(settings.store_id_prefixes),
        )


async def load_snapshot(catalog: CatalogSource) -> Tuple[List[Item], List[Dict]]:
    """Fetch both snapshots concurrently; any failure is a DataAccessFailure."""
    try:
        raw_items, store_docs = await asyncio.gather(
            asyncio.to_thread(catalog.fetch_all_items),
            asyncio.to_thread(catalog.fetch_all_approved_stores),
        )
    except Exception as e:
        logger.exception("search.snapshot_failed %s: %s", type(e).__name__, e)
        raise DataAccessFailure() from e
    try:
        items = [Item.model_validate(doc) for doc in raw_items]
    except ValidationError as e:
        logger.error("search.malformed_items errors=%d first=%s", e.error_count(), e.errors()[:1])
        raise DataAccessFailure("items") from e
    return items, list(store_docs)


async def _run(
    query: str,
    catalog: CatalogSource,
    requester_location: Optional[Location],
    options: SearchOptions,
    keep: Optional[Callable[[SearchResult], bool]] = None,
) -> List[SearchResult]:
    normalized = text_matcher.normalize_query(query)
    if not normalized:
        logger.info("search.empty_query -> []")
        return []

    start = time()
    items, store_docs = await load_snapshot(catalog)
    table = build_store_table(store_docs, options.store_id_prefixes)
    matched = text_matcher.filter_items(normalized, items)
    assembly = assemble(matched, table, requester_location)

    candidates = assembly.results
    if keep is not None:
        candidates = [r for r in candidates if keep(r)]
    results = ranker.rank_and_truncate(candidates, options.limit, options.deadband_km)

    log_search_summary({
        "query": normalized,
        "items_scanned": len(items),
        "stores_indexed": len(table),
        "matched": len(matched),
        "orphaned": assembly.orphaned,
        "without_location": assembly.without_location,
        "returned": len(results),
        "with_location": requester_location is not None,
        "duration_ms": round((time() - start) * 1000, 1),
    })
    return results


async def search_items(
    query: str,
    catalog: CatalogSource,
    requester_location: Optional[Location] = None,
    options: Optional[SearchOptions] = None,
) -> List[SearchResult]:
    """Ranked results (at most ``options.limit``) for ``query``.

    Empty or whitespace-only queries return [] without touching the catalog.
    Raises DataAccessFailure if either snapshot cannot be loaded.
    """
    return await _run(query, catalog, requester_location, options or SearchOptions())


async def search_with_filters(
    query: str,
    catalog: CatalogSource,
    requester_location: Optional[Location] = None,
    verified_only: bool = False,
    max_distance_km: Optional[float] = None,
    options: Optional[SearchOptions] = None,
) -> List[SearchResult]:
    """``search_items`` restricted to verified items and/or a radius.

    The radius only applies when a requester location is given; results whose
    store has no usable location are kept.
    """
    def keep(r: SearchResult) -> bool:
        if verified_only and not r.item.verified:
            return False
        if max_distance_km is not None and requester_location is not None:
            if r.distance is not None and r.distance > max_distance_km:
                return False
        return True

    return await _run(query, catalog, requester_location, options or SearchOptions(), keep)


async def list_store_items(
    store_id: str,
    catalog: CatalogSource,
    options: Optional[SearchOptions] = None,
) -> List[Item]:
    """Non-deleted items whose store reference resolves to ``store_id``."""
    options = options or SearchOptions()
    items, store_docs = await load_snapshot(catalog)
    table = build_store_table(store_docs, options.store_id_prefixes)
    canonical = table.canonical_id(store_id)
    if canonical is None:
        logger.info("store_items.unknown_store id=%s", store_id)
        return []
    owned = [it for it in items if not it.deleted and table.canonical_id(it.store_id) == canonical]
    logger.info("store_items id=%s items=%d", canonical, len(owned))
    return ranker.rank_items(owned)


__all__ = [
    "SearchOptions",
    "load_snapshot",
    "search_items",
    "search_with_filters",
    "list_store_items",
]
