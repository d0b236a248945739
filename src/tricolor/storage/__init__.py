"""Persistence backends for lottery state."""

from tricolor.storage.base import StorageBackend
from tricolor.storage.json_store import JsonFileStorage
from tricolor.storage.memory import InMemoryStorage
from tricolor.storage.serialization import state_from_dict, state_to_dict

__all__ = [
    "StorageBackend",
    "JsonFileStorage",
    "InMemoryStorage",
    "state_from_dict",
    "state_to_dict",
]
