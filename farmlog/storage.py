# farmlog/storage.py

import os
import tempfile
from typing import Dict, Optional, Protocol

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .config import Settings


class StorageError(Exception):
    """Raised when a backend cannot read or write a slot."""


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemoryBackend:
    """Keeps slots in a dict. Used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.slots: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self.slots.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.slots[key] = value


class JsonFileBackend:
    """Stores each slot as <data_dir>/<key>.json."""

    def __init__(self, data_dir: str = "./farm_data"):
        self.data_dir = data_dir
        try:
            os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {data_dir}: {e}") from e
        print(f"---FILE BACKEND: Using {os.path.abspath(self.data_dir)}---")

    def _path(self, key: str) -> str:
        return os.path.join(self.data_dir, f"{key}.json")

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Cannot read slot '{key}': {e}") from e

    def set(self, key: str, value: bytes) -> None:
        # Write to a temp file in the same directory, then swap it in.
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(value)
                os.replace(tmp_path, self._path(key))
            except OSError:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write slot '{key}': {e}") from e


class MongoBackend:
    """Stores each slot as one document {_id: key, value: bytes} in a MongoDB collection."""

    def __init__(self, mongo_uri: str, db_name: str = "farm_fields_log_db", collection: str = "farm_store"):
        self.client = MongoClient(mongo_uri)
        self.db = self.client[db_name]
        self.slots_collection = self.db[collection]
        print("---MONGO BACKEND: Connected to MongoDB---")

    def get(self, key: str) -> Optional[bytes]:
        try:
            doc = self.slots_collection.find_one({"_id": key})
        except PyMongoError as e:
            raise StorageError(f"Cannot read slot '{key}': {e}") from e
        if doc is None:
            return None
        return bytes(doc["value"])

    def set(self, key: str, value: bytes) -> None:
        try:
            self.slots_collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)
        except PyMongoError as e:
            raise StorageError(f"Cannot write slot '{key}': {e}") from e


def open_backend(config: Settings) -> KeyValueBackend:
    """Builds the backend named by config.storage_backend."""
    if config.storage_backend == "file":
        return JsonFileBackend(config.data_dir)
    if config.storage_backend == "mongo":
        return MongoBackend(config.final_mongo_uri, config.mongo_db_name, config.mongo_collection)
    if config.storage_backend == "memory":
        return MemoryBackend()
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")
