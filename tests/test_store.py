from metrics.store import RunStore, merge

from conftest import make_run


def test_merge_is_idempotent():
    runs = (make_run("a"), make_run("b"), make_run("c"))

    once = merge((), runs)
    twice = merge(once, runs)

    assert [r.id for r in once] == ["a", "b", "c"]
    assert twice == once


def test_merge_keeps_first_seen_record():
    file_run = make_run("a", distance=10.0, source="file")
    api_run = make_run("a", distance=12.5, source="Strava API")

    merged = merge((file_run,), (api_run, make_run("b")))

    assert len(merged) == 2
    assert merged[0].source == "file"
    assert merged[0].distance == 10.0


def test_merge_drops_duplicates_within_a_batch():
    merged = merge((), (make_run("a", distance=1.0), make_run("a", distance=2.0)))
    assert len(merged) == 1
    assert merged[0].distance == 1.0


def test_merge_preserves_order():
    merged = merge((make_run("x"), make_run("y")), (make_run("z"), make_run("x")))
    assert [r.id for r in merged] == ["x", "y", "z"]


def test_store_add_get_clear():
    store = RunStore([make_run("a")])
    store.add([make_run("a"), make_run("b")], source="test")

    assert len(store) == 2
    assert "b" in store
    assert store.get("b").id == "b"
    assert store.get("missing") is None

    store.clear()
    assert len(store) == 0
    assert list(store) == []


def test_merge_with_empty_batch_is_identity():
    merged = merge((make_run("a"),), (make_run("b"), make_run("a", distance=3.0)))
    assert merge(merged, ()) == merged
