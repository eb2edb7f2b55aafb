import json

import pytest

from schemadb.db.kv_store import KVStore, StoreClosedError
from schemadb.managers.event_manager import EventManager, STORE_CLOSED, STORE_LOADED


def read_lines(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def test_memory_store_set_get_remove():
    store = KVStore().load()
    done = []
    store.set("1-user", {"name": "Ann"}, done.append)
    assert done == [None]
    assert store.get("1-user") == {"name": "Ann"}
    assert store.size() == 1
    store.remove("1-user", done.append)
    assert done == [None, None]
    assert store.get("1-user") is None
    assert store.path is None


def test_reads_return_copies():
    store = KVStore().load()
    store.set("k", {"tags": ["a"]})
    store.get("k")["tags"].append("b")
    store.for_each(lambda key, val: val["tags"].append("c"))
    assert store.get("k") == {"tags": ["a"]}


def test_for_each_stops_on_false():
    store = KVStore().load()
    for i in range(5):
        store.set(f"{i}-n", i)
    seen = []

    def visit(key, val):
        seen.append(key)
        return False if len(seen) == 2 else None

    store.for_each(visit)
    assert len(seen) == 2


def test_log_replay_keeps_last_write(tmp_path):
    path = str(tmp_path / "store.db")
    store = KVStore(path).load()
    store.set("a", 1)
    store.set("b", 2)
    store.set("a", 3)
    store.remove("b")
    store.close()

    assert [row["key"] for row in read_lines(path)] == ["a", "b", "a", "b"]
    assert "val" not in read_lines(path)[-1]

    reopened = KVStore(path).load()
    assert reopened.keys() == ["a"]
    assert reopened.get("a") == 3
    assert reopened.redundant == 3


def test_compact_rewrites_live_rows_only(tmp_path):
    path = str(tmp_path / "store.db")
    store = KVStore(path).load()
    store.set("a", 1)
    store.set("a", 2)
    store.set("b", {"x": 1})
    store.remove("b")
    store.compact()

    assert read_lines(path) == [{"key": "a", "val": 2}]
    assert store.redundant == 0
    assert KVStore(path).load().get("a") == 2


def test_clear_truncates_the_log(tmp_path):
    path = str(tmp_path / "store.db")
    store = KVStore(path).load()
    store.set("a", 1)
    store.clear()
    assert store.size() == 0
    assert read_lines(path) == []


def test_malformed_lines_are_skipped(tmp_path):
    path = tmp_path / "store.db"
    path.write_text(
        '{"key": "a", "val": 1}\n'
        'this is not json\n'
        '[1, 2, 3]\n'
        '{"key": "b", "val": 2}\n'
        '{"key": "c", "va',
        encoding="utf-8",
    )
    store = KVStore(str(path)).load()
    assert store.size() == 2
    assert store.get("b") == 2


def test_directory_path_is_rejected(tmp_path):
    with pytest.raises(IsADirectoryError):
        KVStore(str(tmp_path)).load()


def test_writes_after_close_fail(tmp_path):
    store = KVStore(str(tmp_path / "store.db")).load()
    store.close()
    assert store.closed

    with pytest.raises(StoreClosedError):
        store.set("a", 1)

    errors = []
    store.remove("a", errors.append)
    assert len(errors) == 1 and isinstance(errors[0], OSError)


def test_unserializable_value_reports_error():
    store = KVStore().load()
    errors = []
    store.set("a", object(), errors.append)
    assert isinstance(errors[0], TypeError)
    assert store.size() == 0


def test_store_events_and_callbacks(tmp_path):
    events = []
    EventManager.on(STORE_LOADED, lambda data: events.append(("loaded", data["size"])))
    EventManager.on(STORE_CLOSED, lambda data: events.append(("closed", data["path"])))
    hooks = []

    path = str(tmp_path / "store.db")
    store = KVStore(path, on_load=lambda s: hooks.append("load"), on_close=lambda s: hooks.append("close"))
    store.load()
    store.close()
    store.close()

    assert events == [("loaded", 0), ("closed", store.path)]
    assert hooks == ["load", "close"]
