"""Persistence collaborators: key-value stores and the in-memory table client."""

from .kv_store import KeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore
from .memory_backend import InMemoryTableClient, InMemoryQuery

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "InMemoryTableClient",
    "InMemoryQuery",
]
