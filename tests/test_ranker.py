import random

from app.models.items import Item, SearchResult, StoreRecord, UNSET_LOCATION
from app.services.ranker import rank, rank_and_truncate, rank_items
from conftest import ts

STORE = StoreRecord(id="s", name="S", address="A", location=UNSET_LOCATION, owner_id="o")


def _r(id, name=None, distance=None, **kw):
    item = Item.model_validate({"id": id, "name": name or id, "storeId": "s", **kw})
    return SearchResult(item=item, store=STORE, distance=distance)


def _ids(results):
    return [r.item.id for r in results]


def test_distance_ascending_first():
    out = rank([_r("far", distance=5.0), _r("near", distance=1.0), _r("mid", distance=2.5)])
    assert _ids(out) == ["near", "mid", "far"]


def test_distance_deadband_falls_through_to_verification():
    out = rank([_r("a", distance=1.0005), _r("b", distance=1.0, verified=False), _r("c", distance=1.0008, verified=True)])
    assert _ids(out)[0] == "c"


def test_with_distance_before_without():
    out = rank([_r("none", verified=True), _r("has", distance=900.0)])
    assert _ids(out) == ["has", "none"]


def test_verified_then_reports_then_recency_then_name():
    out = rank([
        _r("unverified", name="Aaa"),
        _r("reported", verified=True, verifiedAt=ts(20), reportCount=2),
        _r("older", verified=True, verifiedAt=ts(1)),
        _r("newer", verified=True, verifiedAt=ts(10)),
        _r("zed", name="zed", verified=True, verifiedAt=ts(10)),
    ])
    assert _ids(out) == ["newer", "zed", "older", "reported", "unverified"]


def test_name_tiebreak_is_case_insensitive():
    out = rank([_r("1", name="banana"), _r("2", name="Apple"), _r("3", name="cherry")])
    assert [r.item.name for r in out] == ["Apple", "banana", "cherry"]


def test_missing_verified_at_sorts_after_dated():
    out = rank([_r("undated", name="a", verified=True), _r("dated", name="b", verified=True, verifiedAt=ts(2))])
    assert _ids(out) == ["dated", "undated"]


def test_truncates_to_limit():
    results = [_r(f"i{n:02d}", distance=float(n)) for n in range(50)]
    out = rank_and_truncate(results)
    assert len(out) == 20
    assert _ids(out)[0] == "i00"
    assert len(rank_and_truncate(results, limit=5)) == 5


def test_order_independent_of_input_order():
    results = [
        _r(f"i{n}", name=f"n{n % 7}", distance=(n % 4) * 0.5 if n % 3 else None,
           verified=bool(n % 2), reportCount=n % 3, verifiedAt=ts(1 + n % 5))
        for n in range(30)
    ]
    expected = _ids(rank(results))
    rng = random.Random(7)
    for _ in range(5):
        shuffled = results[:]
        rng.shuffle(shuffled)
        assert _ids(rank(shuffled)) == expected


def test_ranked_distances_respect_deadband():
    rng = random.Random(3)
    results = [_r(f"i{n}", distance=rng.randint(0, 30) / 10 + rng.choice([0, 0.0004]),
                  verified=rng.random() < 0.5) for n in range(40)]
    out = rank(results)
    for i, first in enumerate(out):
        for second in out[i + 1:]:
            assert first.distance <= second.distance + 0.001


def _assert_distance_order(out):
    for i, first in enumerate(out):
        for second in out[i + 1:]:
            assert first.distance <= second.distance + 0.001


def test_chained_close_distances_keep_order_when_tiebreaks_disagree():
    near = _r("near", distance=1.000)
    mid = _r("mid", distance=1.001, verified=True, reportCount=1)
    far = _r("far", distance=1.002, verified=True)
    for ordering in ([far, mid, near], [near, mid, far], [mid, far, near]):
        out = rank(ordering)
        _assert_distance_order(out)
        assert _ids(out) == ["mid", "near", "far"]


def test_millimetre_spaced_distances_respect_deadband():
    rng = random.Random(11)
    for _ in range(50):
        results = [_r(f"i{n}", distance=1 + rng.randint(0, 15) / 1000,
                      verified=rng.random() < 0.5, reportCount=rng.randint(0, 2),
                      verifiedAt=ts(rng.randint(1, 9)))
                   for n in range(25)]
        rng.shuffle(results)
        _assert_distance_order(rank(results))


def test_rank_items_without_distance():
    items = [Item.model_validate({"id": i, "name": i, "verified": v}) for i, v in [("b", False), ("a", True)]]
    assert [it.id for it in rank_items(items)] == ["a", "b"]
