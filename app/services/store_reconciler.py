"""Canonical store lookup built from the approved ``storeRequests`` snapshot.

Store documents come from several generations of the owner onboarding flow, so
the same fact lives under different keys:

    name      <- storeName | name            (default "Store")
    address   <- storeAddress | address      (default "Address not available")
    location  <- storeLocation | location    (default (0, 0), the unset sentinel)
    owner_id  <- ownerId | requestedBy       (default "unknown")

Items reference stores by raw id, which may carry a ``virtual_`` or ``temp_``
prefix left over from store creation. ``StoreTable.resolve`` tries the raw id,
then the id with the first matching prefix stripped. Anything else is an
orphan.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from app.models.items import Location, StoreRecord, UNSET_LOCATION
from app.scripts.logging_config import get_logger

logger = get_logger("store_reconciler")

DEFAULT_STORE_ID_PREFIXES = ("virtual_", "temp_")


def _first_text(doc: Mapping[str, Any], *keys: str) -> Optional[str]:
    for k in keys:
        v = doc.get(k)
        if isinstance(v, str) and v.strip():
            return v
    return None


def _coerce_location(raw: Any) -> Optional[Location]:
    """Accept a Firestore GeoPoint, a {latitude, longitude} map or a (lat, lng) pair."""
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        lat, lng = raw.get("latitude"), raw.get("longitude")
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        lat, lng = raw
    else:
        lat, lng = getattr(raw, "latitude", None), getattr(raw, "longitude", None)
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return Location(latitude=lat, longitude=lng)


def normalize_store(doc: Mapping[str, Any]) -> StoreRecord:
    """Fold a raw store document into a :class:`StoreRecord`."""
    location = _coerce_location(doc.get("storeLocation")) or _coerce_location(doc.get("location"))
    return StoreRecord(
        id=str(doc["id"]),
        name=_first_text(doc, "storeName", "name") or "Store",
        address=_first_text(doc, "storeAddress", "address") or "Address not available",
        location=location or UNSET_LOCATION,
        owner_id=_first_text(doc, "ownerId", "requestedBy") or "unknown",
    )


@dataclass(frozen=True)
class StoreTable:
    """Per-query lookup of canonical store id -> StoreRecord."""

    records: Mapping[str, StoreRecord]
    prefixes: Sequence[str] = field(default=DEFAULT_STORE_ID_PREFIXES)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, store_id: object) -> bool:
        return store_id in self.records

    def candidate_ids(self, raw_store_id: str) -> List[str]:
        """Ids to look up for ``raw_store_id``, in order. At most one prefix is stripped."""
        candidates = [raw_store_id]
        for prefix in self.prefixes:
            if raw_store_id.startswith(prefix):
                stripped = raw_store_id[len(prefix):]
                if stripped:
                    candidates.append(stripped)
                break
        return candidates

    def canonical_id(self, raw_store_id: Optional[str]) -> Optional[str]:
        if not raw_store_id:
            return None
        for candidate in self.candidate_ids(raw_store_id):
            if candidate in self.records:
                return candidate
        return None

    def resolve(self, raw_store_id: Optional[str]) -> Optional[StoreRecord]:
        """Return the StoreRecord referenced by ``raw_store_id`` or None when orphaned."""
        store_id = self.canonical_id(raw_store_id)
        return self.records[store_id] if store_id is not None else None


def build_store_table(
    store_docs: Iterable[Mapping[str, Any]],
    prefixes: Sequence[str] = DEFAULT_STORE_ID_PREFIXES,
) -> StoreTable:
    records: Dict[str, StoreRecord] = {}
    skipped = 0
    for doc in store_docs:
        if not doc.get("id"):
            skipped += 1
            continue
        record = normalize_store(doc)
        if record.id in records:
            logger.warning("store_reconciler.duplicate_id id=%s (keeping first)", record.id)
            continue
        records[record.id] = record
    if skipped:
        logger.warning("store_reconciler.skipped_without_id count=%d", skipped)
    logger.debug("store_reconciler.table_built stores=%d", len(records))
    return StoreTable(records=records, prefixes=tuple(prefixes))


def resolve(raw_store_id: Optional[str], table: StoreTable) -> Optional[StoreRecord]:
    return table.resolve(raw_store_id)


__all__ = [
    "DEFAULT_STORE_ID_PREFIXES",
    "StoreTable",
    "build_store_table",
    "normalize_store",
    "resolve",
]
