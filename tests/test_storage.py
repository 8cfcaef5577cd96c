import pytest

from medicare.services.storage import (
    CART_KEY,
    ORDERS_KEY,
    FileStorage,
    MemoryStorage,
    SqlStorage,
    build_storage,
)


def test_missing_key_returns_default():
    s = MemoryStorage()
    assert s.get(CART_KEY) is None
    assert s.get(CART_KEY, []) == []


def test_unknown_key_rejected():
    s = MemoryStorage()
    with pytest.raises(ValueError):
        s.set("wishlist", [])
    with pytest.raises(ValueError):
        s.get("wishlist")


def test_non_json_value_rejected():
    s = MemoryStorage()
    with pytest.raises(TypeError):
        s.set(CART_KEY, {"when": object()})
    assert s.raw(CART_KEY) is None


def test_last_write_wins_and_delete():
    s = MemoryStorage({CART_KEY: [{"medicine_id": 1}]})
    s.set(CART_KEY, [])
    assert s.get(CART_KEY) == []
    s.delete(CART_KEY)
    assert s.get(CART_KEY) is None
    # deleting twice is fine
    s.delete(CART_KEY)


def test_file_storage_persists_across_instances(tmp_path):
    first = FileStorage(str(tmp_path / "store"))
    first.set(ORDERS_KEY, [{"orderId": "ORD1"}])
    second = FileStorage(str(tmp_path / "store"))
    assert second.get(ORDERS_KEY) == [{"orderId": "ORD1"}]
    assert (tmp_path / "store" / "orders.json").exists()
    second.delete(ORDERS_KEY)
    assert first.get(ORDERS_KEY) is None


def test_sql_storage_round_trip(app):
    with app.app_context():
        s = SqlStorage()
        assert s.get(CART_KEY) is None
        s.set(CART_KEY, [{"medicine_id": 2, "quantity": 3}])
        s.set(CART_KEY, [{"medicine_id": 2, "quantity": 4}])
        assert s.get(CART_KEY) == [{"medicine_id": 2, "quantity": 4}]
        s.delete(CART_KEY)
        assert s.raw(CART_KEY) is None


def test_build_storage_selects_backend(tmp_path):
    assert isinstance(build_storage({"STORAGE_BACKEND": "memory"}), MemoryStorage)
    fs = build_storage({"STORAGE_BACKEND": "file", "STORAGE_PATH": str(tmp_path)})
    assert isinstance(fs, FileStorage)
    assert isinstance(build_storage({"STORAGE_BACKEND": "SQL"}), SqlStorage)
    with pytest.raises(RuntimeError):
        build_storage({"STORAGE_BACKEND": "redis"})
