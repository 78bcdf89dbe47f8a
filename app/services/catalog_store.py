"""Read-only access to the item and store snapshots in Firestore.

Firestore layout
    items/{item_id}                { name, category, description, storeId, price, inStock,
                                     verified, verifiedAt, reportCount, deleted, ... }
    storeRequests/{store_id}       { storeName|name, storeAddress|address,
                                     storeLocation|location, ownerId, requestedBy,
                                     status: pending|approved|rejected, deleted, ... }

Only approved, non-deleted store requests are eligible for discovery.
"""
from __future__ import annotations
from typing import Dict, List, Protocol

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter

from config import settings
from app.scripts.logging_config import get_logger

logger = get_logger("catalog_store")

_db = None

def get_db():
    global _db
    if _db is None:
        _db = firestore.client()
    return _db


class CatalogSource(Protocol):
    """Snapshot provider consumed by the search pipeline."""

    def fetch_all_items(self) -> List[Dict]:
        ...

    def fetch_all_approved_stores(self) -> List[Dict]:
        ...


def _with_id(snap) -> Dict:
    data = snap.to_dict() or {}
    data["id"] = snap.id
    return data


class FirestoreCatalog:
    def __init__(self, db=None, items_collection: str | None = None,
                 stores_collection: str | None = None, approved_status: str | None = None):
        self._db = db
        self.items_collection = items_collection or settings.ITEMS_COLLECTION
        self.stores_collection = stores_collection or settings.STORES_COLLECTION
        self.approved_status = approved_status or settings.APPROVED_STORE_STATUS

    @property
    def db(self):
        return self._db if self._db is not None else get_db()

    def fetch_all_items(self) -> List[Dict]:
        docs = [_with_id(s) for s in self.db.collection(self.items_collection).stream()]
        logger.info("firestore.read collection=%s docs=%d", self.items_collection, len(docs))
        return docs

    def fetch_all_approved_stores(self) -> List[Dict]:
        query = self.db.collection(self.stores_collection).where(
            filter=FieldFilter("status", "==", self.approved_status)
        )
        approved = [_with_id(s) for s in query.stream()]
        # soft-deleted flag is not indexed, filter client-side
        active = [d for d in approved if not d.get("deleted")]
        logger.info("firestore.read collection=%s approved=%d active=%d",
                    self.stores_collection, len(approved), len(active))
        return active


__all__ = ["CatalogSource", "FirestoreCatalog", "get_db"]
