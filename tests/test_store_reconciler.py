from types import SimpleNamespace

from app.models.items import UNSET_LOCATION
from app.services.store_reconciler import build_store_table, normalize_store, resolve
from conftest import make_store


def test_virtual_prefix_resolves_and_unknown_is_orphaned():
    table = build_store_table([make_store("ABC123")])
    assert resolve("virtual_ABC123", table).id == "ABC123"
    assert resolve("XYZ999", table) is None


def test_exact_match_wins_over_stripping():
    table = build_store_table([make_store("virtual_A", storeName="Exact"), make_store("A", storeName="Stripped")])
    assert table.resolve("virtual_A").name == "Exact"


def test_temp_prefix_and_only_one_prefix_stripped():
    table = build_store_table([make_store("S1")])
    assert table.resolve("temp_S1").id == "S1"
    assert table.resolve("virtual_temp_S1") is None
    assert table.resolve("temp_virtual_S1") is None


def test_missing_store_reference_is_orphaned():
    table = build_store_table([make_store("S1")])
    assert table.resolve(None) is None
    assert table.resolve("") is None
    assert table.resolve("virtual_") is None


def test_custom_prefix_order():
    table = build_store_table([make_store("X")], prefixes=["legacy_"])
    assert table.resolve("legacy_X").id == "X"
    assert table.resolve("virtual_X") is None


def test_normalize_prefers_store_fields_then_fallbacks():
    rec = normalize_store({
        "id": "s1",
        "storeName": "Corner Hardware",
        "name": "ignored",
        "address": "12 High St",
        "storeLocation": {"latitude": -33.9, "longitude": 151.2},
        "requestedBy": "uid-7",
    })
    assert rec.name == "Corner Hardware"
    assert rec.address == "12 High St"
    assert (rec.location.latitude, rec.location.longitude) == (-33.9, 151.2)
    assert rec.owner_id == "uid-7"


def test_normalize_defaults():
    rec = normalize_store({"id": "s2"})
    assert rec.name == "Store"
    assert rec.address == "Address not available"
    assert rec.location == UNSET_LOCATION
    assert rec.location.is_unset
    assert rec.owner_id == "unknown"


def test_normalize_geopoint_and_bad_coordinates():
    geo = SimpleNamespace(latitude=10.0, longitude=20.0)
    assert normalize_store({"id": "g", "location": geo}).location.latitude == 10.0
    assert normalize_store({"id": "b", "location": {"latitude": "n/a", "longitude": 3}}).location.is_unset
    assert normalize_store({"id": "o", "location": {"latitude": 95, "longitude": 3}}).location.is_unset
    # falls through to location when storeLocation is unusable
    rec = normalize_store({"id": "f", "storeLocation": None, "location": [1.5, 2.5]})
    assert rec.location.longitude == 2.5


def test_table_skips_docs_without_id_and_keeps_first_duplicate():
    table = build_store_table([{"storeName": "no id"}, make_store("D", storeName="first"), make_store("D", storeName="second")])
    assert len(table) == 1
    assert table.resolve("D").name == "first"
