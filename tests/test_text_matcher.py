import pytest

from app.models.items import Item
from app.services.text_matcher import filter_items, matches, normalize_query


def _item(**kw):
    base = {"id": "i1", "name": "Widget", "storeId": "s1"}
    base.update(kw)
    return Item.model_validate(base)


@pytest.mark.parametrize("raw,expected", [("  Red Hammer ", "red hammer"), ("", ""), ("   ", ""), (None, "")])
def test_normalize_query(raw, expected):
    assert normalize_query(raw) == expected


def test_normalize_query_keeps_long_queries_whole():
    long_query = "X" * 250 + " NoMatch "
    assert normalize_query(long_query) == "x" * 250 + " nomatch"


def test_matches_any_field_case_insensitive():
    assert matches("red hammer", _item(name="Red Hammer"))
    assert matches("red hammer", _item(name="Camping Supplies", description="Includes RED HAMMER clip"))
    assert matches("tools", _item(name="Wrench", category="Hand Tools"))
    assert not matches("drill", _item(name="Wrench", category="Hand Tools"))


def test_deleted_items_never_match():
    assert not matches("widget", _item(deleted=True))


def test_empty_query_matches_nothing():
    assert not matches("", _item())


def test_filter_items_keeps_order():
    items = [_item(id="a", name="Blue Tape"), _item(id="b", name="Glue"), _item(id="c", name="tape measure")]
    assert [it.id for it in filter_items("tape", items)] == ["a", "c"]
