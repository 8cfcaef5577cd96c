"""Persistence adapter: JSON values under a small fixed set of keys.

Last write wins, no transactions. The engine reads each key once when a
session starts and writes after every mutation.
"""
import json
import logging
import os
from typing import Any, Dict

from models import db
from models.storage import StoredValue
from medicare.utils.db import transactional

logger = logging.getLogger(__name__)

CART_KEY = "cart"
ORDERS_KEY = "orders"
REMINDERS_KEY = "reminders"
AUTH_TOKEN_KEY = "authToken"
CURRENT_USER_KEY = "currentUser"

STORAGE_KEYS = (CART_KEY, ORDERS_KEY, REMINDERS_KEY, AUTH_TOKEN_KEY, CURRENT_USER_KEY)


def _check_key(key: str) -> None:
    if key not in STORAGE_KEYS:
        raise ValueError(f"unknown storage key: {key!r}")


def _encode(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise TypeError(f"value is not JSON-serializable: {e}") from e


class Storage:
    """Interface every backend implements."""

    def get(self, key: str, default: Any = None) -> Any:
        _check_key(key)
        raw = self._read(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        _check_key(key)
        self._write(key, _encode(value))

    def delete(self, key: str) -> None:
        _check_key(key)
        self._remove(key)

    def raw(self, key: str):
        """Stored JSON text for ``key``, or None."""
        _check_key(key)
        return self._read(key)

    def _read(self, key):
        raise NotImplementedError

    def _write(self, key, text):
        raise NotImplementedError

    def _remove(self, key):
        raise NotImplementedError


def load_entries(storage: Storage, key: str) -> list:
    """The list stored under ``key``; a corrupt or non-list blob reads as empty."""
    try:
        value = storage.get(key, [])
    except ValueError as e:
        logger.warning("Stored %s is not valid JSON, starting empty: %s", key, e)
        return []
    if not isinstance(value, list):
        logger.warning("Stored %s is not a list, starting empty", key)
        return []
    return value


class MemoryStorage(Storage):
    def __init__(self, initial: Dict[str, Any] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def _read(self, key):
        return self._data.get(key)

    def _write(self, key, text):
        self._data[key] = text

    def _remove(self, key):
        self._data.pop(key, None)


class FileStorage(Storage):
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key):
        return os.path.join(self.directory, f"{key}.json")

    def _read(self, key):
        try:
            with open(self._path(key), "r", encoding="utf-8") as fh:
                return fh.read()
        except FileNotFoundError:
            return None

    def _write(self, key, text):
        path = self._path(key)
        tmp = path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp, path)

    def _remove(self, key):
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


class SqlStorage(Storage):
    """Backed by the ``stored_value`` table; needs an app context."""

    def _read(self, key):
        row = db.session.get(StoredValue, key)
        return row.value if row else None

    def _write(self, key, text):
        with transactional(f"Failed to persist {key}"):
            row = db.session.get(StoredValue, key)
            if row:
                row.value = text
            else:
                db.session.add(StoredValue(key=key, value=text))

    def _remove(self, key):
        with transactional(f"Failed to delete {key}"):
            row = db.session.get(StoredValue, key)
            if row:
                db.session.delete(row)


def build_storage(config) -> Storage:
    backend = (config.get("STORAGE_BACKEND") or "memory").lower()
    if backend == "memory":
        storage = MemoryStorage()
    elif backend == "file":
        storage = FileStorage(config.get("STORAGE_PATH") or "instance/storage")
    elif backend == "sql":
        storage = SqlStorage()
    else:
        raise RuntimeError(f"Unsupported STORAGE_BACKEND: {backend}")
    logger.info("Using %s storage backend", backend)
    return storage
