"""Remote state store adapters."""

from homedash.store.base import StateStore
from homedash.store.firebase import FirebaseStore
from homedash.store.memory import MemoryStore

__all__ = ["FirebaseStore", "MemoryStore", "StateStore"]
