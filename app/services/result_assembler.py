from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from app.domain.geodistance import distance_km
from app.models.items import Item, Location, SearchResult
from app.scripts.logging_config import get_logger, log_orphaned_item
from .store_reconciler import StoreTable

logger = get_logger("result_assembler")


@dataclass
class Assembly:
    results: List[SearchResult] = field(default_factory=list)
    orphaned: int = 0
    without_location: int = 0


def _usable(location: Optional[Location]) -> bool:
    return location is not None and not location.is_unset


def assemble(
    items: Iterable[Item],
    table: StoreTable,
    requester_location: Optional[Location] = None,
) -> Assembly:
    """Join matched items to their stores; orphans are dropped and logged."""
    out = Assembly()
    measure = _usable(requester_location)
    for item in items:
        store = table.resolve(item.store_id)
        if store is None:
            out.orphaned += 1
            log_orphaned_item(item.id, item.store_id, item.name)
            continue
        distance = None
        if measure:
            if _usable(store.location):
                distance = distance_km(requester_location, store.location)
            else:
                out.without_location += 1
        out.results.append(SearchResult(item=item, store=store, distance=distance))
    if out.orphaned:
        logger.info("result_assembler.orphans_dropped count=%d kept=%d", out.orphaned, len(out.results))
    return out


__all__ = ["Assembly", "assemble"]
