# tests/test_cache.py

from __future__ import annotations

from server.cache import SnapshotCache

from .fakes import FakeClock


def test_empty_cache_is_not_fresh() -> None:
    cache = SnapshotCache("tasks", 5, clock=FakeClock())
    assert cache.get("alice") == ((), False)


def test_fresh_within_window_then_stale() -> None:
    clock = FakeClock()
    cache = SnapshotCache("tasks", 5, clock=clock)
    cache.set("alice", ["a", "b"])

    clock.advance(4.9)
    assert cache.get("alice") == (("a", "b"), True)

    clock.advance(0.2)
    items, fresh = cache.get("alice")
    assert items == ("a", "b")
    assert fresh is False


def test_new_owner_evicts_previous_slot() -> None:
    cache = SnapshotCache("tasks", 5, clock=FakeClock())
    cache.set("alice", ["a"])
    cache.set("bob", ["b"])

    assert cache.get("alice") == ((), False)
    assert cache.get("bob") == (("b",), True)
    assert cache.owner_key == "bob"


def test_set_replaces_wholesale() -> None:
    cache = SnapshotCache("tasks", 5, clock=FakeClock())
    source = ["a"]
    cache.set("alice", source)
    held, _ = cache.get("alice")

    source.append("b")
    cache.set("alice", ["c"])

    # A reader holding the previous snapshot keeps a consistent view.
    assert held == ("a",)
    assert cache.get("alice")[0] == ("c",)


def test_invalidate_clears_everything() -> None:
    cache = SnapshotCache("tasks", 5, clock=FakeClock())
    cache.set("alice", ["a"])
    cache.invalidate()
    assert cache.get("alice") == ((), False)
    assert cache.owner_key is None


def test_empty_snapshot_is_still_cached() -> None:
    cache = SnapshotCache("tasks", 5, clock=FakeClock())
    cache.set("alice", [])
    assert cache.get("alice") == ((), True)
