import threading
import pytest
from common.errors import ResourceNotFound, StoreIntegrityError
from resource_service.store import ResourceStore


def test_create_allocates_increasing_ids(orders_store):
    first = orders_store.create({"name": "widget"})
    second = orders_store.create({"name": "gadget"})

    assert first.id == 1
    assert second.id == 2
    assert first.type == "orders"


def test_ids_are_never_reused(orders_store):
    orders_store.create({"name": "widget"})
    orders_store.create({"name": "gadget"})
    orders_store.delete_many([1])

    third = orders_store.create({"name": "gizmo"})
    assert third.id == 3


def test_list_keeps_creation_order(orders_store):
    for name in ("a", "b", "c"):
        orders_store.create({"name": name})
    orders_store.replace(1, {"name": "a2"})

    assert [r.payload["name"] for r in orders_store.list()] == ["a2", "b", "c"]


def test_get_unknown_id(orders_store):
    with pytest.raises(ResourceNotFound) as exc:
        orders_store.get(99)
    assert exc.value.resource_id == 99


def test_replace_unknown_id_leaves_store_unchanged(orders_store):
    orders_store.create({"name": "widget"})
    before = orders_store.list()

    with pytest.raises(ResourceNotFound):
        orders_store.replace(5, {"name": "other"})

    assert orders_store.list() == before


def test_delete_many_is_all_or_nothing(orders_store):
    orders_store.create({"name": "a"})
    orders_store.create({"name": "b"})

    with pytest.raises(ResourceNotFound):
        orders_store.delete_many([1, 7])

    assert len(orders_store) == 2
    assert 1 in orders_store


def test_delete_many_ignores_repeated_ids(orders_store):
    orders_store.create({"name": "a"})
    assert orders_store.delete_many([1, 1]) == [1]
    assert len(orders_store) == 0


def test_returned_payloads_are_copies(orders_store):
    payload = {"tags": ["x"]}
    created = orders_store.create(payload)

    payload["tags"].append("from caller")
    created.payload["tags"].append("from result")

    assert orders_store.get(1).payload == {"tags": ["x"]}


def test_duplicate_id_is_an_internal_fault(orders_store, caplog):
    orders_store.create({"name": "a"})
    # Corrupt the counter to simulate a broken invariant
    orders_store._next_id = 1

    with caplog.at_level("ERROR"):
        with pytest.raises(StoreIntegrityError):
            orders_store.create({"name": "b"})

    assert "already in use" in caplog.text
    assert len(orders_store) == 1


def test_concurrent_creates_get_unique_ids():
    store = ResourceStore("orders")

    def worker():
        for _ in range(50):
            store.create({"n": 1})

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [r.id for r in store.list()]
    assert len(ids) == 400
    assert sorted(ids) == list(range(1, 401))
    assert ids == sorted(ids)


def test_readers_never_see_half_applied_remove():
    store = ResourceStore("orders")
    for _ in range(200):
        store.create({"n": 1})

    done = threading.Event()
    torn = []

    def reader():
        while not done.is_set():
            ids = {r.id for r in store.list()}
            # ids are removed in pairs (1, 2), (3, 4), ...
            torn.extend(k for k in range(1, 201, 2) if (k in ids) != (k + 1 in ids))

    def writer():
        for k in range(1, 201, 2):
            store.delete_many([k, k + 1])
            store.create({"n": 2})

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    writer_thread.join()
    done.set()
    for t in readers:
        t.join()

    assert torn == []
    assert [r.id for r in store.list()] == list(range(201, 301))
