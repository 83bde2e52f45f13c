# tests/test_record_store.py
from __future__ import annotations

import threading
from pathlib import Path

import pytest

from catalog.database import build_engine, init_schema, session_scope
from catalog.errors import ConflictError, NotFoundError, StorageError
from catalog.models.product import Product
from catalog.models.record import RecordRow
from catalog.models.sku import Sku
from catalog.repositories.record_store import RecordStore, next_id
from catalog.services.quantity import ComplexQuantity, SimpleQuantity, Unit


def _product(pid: int, name: str = "P") -> Product:
    return Product.new(pid, name, f"{name} description", Unit.GRAM, created_by=1)


@pytest.fixture()
def store(tmp_path: Path):
    s = RecordStore.load_or_init(tmp_path / "products.db", Product, name="products")
    try:
        yield s
    finally:
        s.close()


# --- Identity allocator -------------------------------------------------------
def test_next_id_from_ids():
    assert next_id([1, 3, 4]) == 5
    assert next_id([]) == 1
    assert next_id([7]) == 8


def test_store_next_id(store: RecordStore):
    assert store.next_id() == 1
    for pid in (1, 3, 4):
        store.insert(_product(pid))
    assert store.next_id() == 5


def test_insert_new_allocates_sequential_ids(store: RecordStore):
    a = store.insert_new(lambda i: _product(i, "A"))
    b = store.insert_new(lambda i: _product(i, "B"))
    assert (a.id, b.id) == (1, 2)


@pytest.mark.timeout(30)
def test_concurrent_insert_new_never_duplicates_ids(store: RecordStore):
    workers, per_worker = 8, 10
    errors: list[BaseException] = []

    def _work():
        try:
            for _ in range(per_worker):
                store.insert_new(lambda i: _product(i))
        except BaseException as exc:  # colectăm pentru aserție
            errors.append(exc)

    threads = [threading.Thread(target=_work) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors, errors
    ids = store.ids()
    assert len(ids) == workers * per_worker
    assert sorted(ids) == list(range(1, workers * per_worker + 1))


# --- Insert / find ------------------------------------------------------------
def test_duplicate_insert_is_conflict(store: RecordStore):
    store.insert(_product(1))
    with pytest.raises(ConflictError):
        store.insert(_product(1, "other"))
    assert len(store) == 1


def test_find_missing_is_not_found(store: RecordStore):
    with pytest.raises(NotFoundError):
        store.find(42)
    with pytest.raises(NotFoundError):
        with store.find_mut(42):
            pass


def test_find_returns_detached_copy(store: RecordStore):
    store.insert(_product(1, "Soil"))
    view = store.find(1)
    view.name = "changed"
    assert store.find(1).name == "Soil"


def test_find_mut_persists_changes(tmp_path: Path, store: RecordStore):
    store.insert(_product(1, "Soil"))
    with store.find_mut(1) as p:
        p.name = "Premium Soil"
    assert store.find(1).name == "Premium Soil"

    reloaded = RecordStore.load_or_init(tmp_path / "products.db", Product)
    try:
        assert reloaded.find(1).name == "Premium Soil"
    finally:
        reloaded.close()


def test_find_mut_aborted_leaves_state_unchanged(tmp_path: Path, store: RecordStore):
    store.insert(_product(1, "Soil"))
    with pytest.raises(RuntimeError):
        with store.find_mut(1) as p:
            p.name = "half-done"
            raise RuntimeError("boom")
    assert store.find(1).name == "Soil"

    reloaded = RecordStore.load_or_init(tmp_path / "products.db", Product)
    try:
        assert reloaded.find(1).name == "Soil"
    finally:
        reloaded.close()


def test_update_where_is_all_or_nothing(store: RecordStore):
    for pid in (1, 2, 3):
        store.insert(_product(pid, "A"))

    def _mutate(p: Product) -> None:
        if p.id == 2:
            raise ValueError("validation failed")
        p.name = "B"

    with pytest.raises(ValueError):
        store.update_where(lambda p: True, _mutate)
    assert [p.name for p in store.iterate()] == ["A", "A", "A"]

    changed = store.update_where(lambda p: p.id != 2, lambda p: setattr(p, "name", "B"))
    assert [p.id for p in changed] == [1, 3]
    assert [p.name for p in store.iterate()] == ["B", "A", "B"]


def test_discard_removes_record_and_row(tmp_path: Path, store: RecordStore):
    for pid in (1, 2, 3):
        store.insert(_product(pid))
    store.discard(2)
    assert store.ids() == [1, 3]
    assert store.find(3).id == 3
    with pytest.raises(NotFoundError):
        store.find(2)
    with pytest.raises(NotFoundError):
        store.discard(2)

    reloaded = RecordStore.load_or_init(tmp_path / "products.db", Product)
    try:
        assert reloaded.ids() == [1, 3]
    finally:
        reloaded.close()


# --- Iterate ------------------------------------------------------------------
def test_iterate_is_insertion_ordered_and_restartable(store: RecordStore):
    for pid in (3, 1, 2):
        store.insert(_product(pid))
    first = [p.id for p in store.iterate()]
    second = [p.id for p in store.iterate()]
    assert first == second == [3, 1, 2]


def test_iterate_is_lazy(store: RecordStore):
    store.insert(_product(1))
    it = store.iterate()
    store.insert(_product(2))
    # snapshot-ul se ia la primul next()
    assert [p.id for p in it] == [1, 2]


# --- Persistence --------------------------------------------------------------
def test_persistence_round_trip(tmp_path: Path):
    path = tmp_path / "skus.db"
    parent = _product(1, "Soil")
    s = RecordStore.load_or_init(path, Sku)
    written = [
        s.insert(Sku.new(1, parent, "5kg bag", SimpleQuantity(count=5000), 7)),
        s.insert(Sku.new(2, parent, "pack", ComplexQuantity(multiplier=3, count=5), 7)),
    ]
    with s.find_mut(1) as sku:
        sku.set_divide(True)
    written[0] = s.find(1)
    s.close()

    reloaded = RecordStore.load_or_init(path, Sku)
    try:
        records = list(reloaded.iterate())
    finally:
        reloaded.close()

    assert [r.model_dump() for r in records] == [w.model_dump() for w in written]
    assert isinstance(records[0].quantity, SimpleQuantity)
    assert isinstance(records[1].quantity, ComplexQuantity)
    assert records[0].unit is Unit.GRAM
    assert records[0].can_divide is True


def test_load_missing_path_starts_empty(tmp_path: Path):
    s = RecordStore.load_or_init(tmp_path / "nested" / "dir" / "products.db", Product)
    try:
        assert len(s) == 0
        assert list(s.iterate()) == []
    finally:
        s.close()


def test_load_corrupt_file_is_storage_error(tmp_path: Path):
    path = tmp_path / "products.db"
    path.write_bytes(b"this is definitely not a sqlite database\n" * 64)
    with pytest.raises(StorageError):
        RecordStore.load_or_init(path, Product)


def test_load_invalid_payload_is_storage_error(tmp_path: Path):
    path = tmp_path / "products.db"
    engine = build_engine(path)
    init_schema(engine)
    with session_scope(engine) as db:
        db.add(RecordRow(record_id=1, payload='{"id": 1, "name": "no unit"}'))
    engine.dispose()

    with pytest.raises(StorageError):
        RecordStore.load_or_init(path, Product)


def test_load_directory_path_is_storage_error(tmp_path: Path):
    with pytest.raises(StorageError):
        RecordStore.load_or_init(tmp_path, Product)
