from datetime import datetime, timezone


class FakeCatalog:
    """In-memory CatalogSource; counts fetches and can be told to fail."""

    def __init__(self, items=None, stores=None, fail_on=None):
        self.items = items or []
        self.stores = stores or []
        self.fail_on = fail_on
        self.calls = {"items": 0, "stores": 0}

    def fetch_all_items(self):
        self.calls["items"] += 1
        if self.fail_on == "items":
            raise RuntimeError("permission denied")
        return [dict(d) for d in self.items]

    def fetch_all_approved_stores(self):
        self.calls["stores"] += 1
        if self.fail_on == "stores":
            raise ConnectionError("firestore unreachable")
        return [dict(d) for d in self.stores]


def make_item(id, name, store_id, **extra):
    doc = {"id": id, "name": name, "storeId": store_id, "verified": False, "reportCount": 0}
    doc.update(extra)
    return doc


def make_store(id, lat=0.0, lng=0.0, **extra):
    doc = {"id": id, "storeName": f"Store {id}", "storeAddress": f"{id} Main St",
           "location": {"latitude": lat, "longitude": lng}, "ownerId": f"owner_{id}",
           "status": "approved"}
    doc.update(extra)
    return doc


def ts(day):
    return datetime(2024, 1, day, tzinfo=timezone.utc)
