"""Report items whose store reference no longer resolves to an approved store.

    python -m app.scripts.orphan_audit [--limit N] [--credentials path.json]

Read-only: loads the same snapshots the search uses and logs every orphan
through the ``search_diagnostics`` logger.
"""
from __future__ import annotations
import argparse
import asyncio
from typing import Dict, List, Optional

import firebase_admin
from firebase_admin import credentials

from config import settings
from app.scripts.logging_config import get_logger, log_orphaned_item, setup_logging
from app.services.catalog_store import CatalogSource, FirestoreCatalog
from app.services.search_service import load_snapshot
from app.services.store_reconciler import build_store_table

logger = get_logger("orphan_audit")


def find_orphans(catalog: CatalogSource, limit: Optional[int] = None) -> Dict:
    items, store_docs = asyncio.run(load_snapshot(catalog))
    table = build_store_table(store_docs, settings.store_id_prefixes)
    orphans: List[Dict] = []
    live = [it for it in items if not it.deleted]
    for it in live:
        if table.resolve(it.store_id) is None:
            orphans.append({"id": it.id, "name": it.name, "store_id": it.store_id})
    for o in orphans[:limit] if limit is not None else orphans:
        log_orphaned_item(o["id"], o["store_id"], o["name"])
    summary = {
        "items": len(live),
        "stores": len(table),
        "orphaned": len(orphans),
        "reported": len(orphans) if limit is None else min(limit, len(orphans)),
    }
    logger.info("orphan_audit_done items=%d stores=%d orphaned=%d",
                summary["items"], summary["stores"], summary["orphaned"])
    return summary


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Find items referencing unknown stores")
    parser.add_argument("--limit", type=int, default=None, help="max orphans to log (default: all)")
    parser.add_argument("--credentials", default=settings.GOOGLE_APPLICATION_CREDENTIALS or "firebase-credentials.json",
                        help="service account json")
    args = parser.parse_args()

    setup_logging(json_fmt=settings.LOG_JSON, log_dir=settings.LOG_DIR)
    if not firebase_admin._apps:
        firebase_admin.initialize_app(credentials.Certificate(args.credentials))

    result = find_orphans(FirestoreCatalog(), limit=args.limit)
    print(f"[RESULT] {result}")
