"""Structural type for the realtime key-value store."""

from collections.abc import AsyncIterator
from typing import Protocol


class StateStore(Protocol):
    """Key-value store with push subscriptions.

    ``subscribe`` yields the key's current value first (None when it has
    none) and then every subsequent value until the iterator is closed.
    Implementations raise :class:`homedash.errors.StoreError` on failure.
    """

    async def read(self, key: str) -> str | None: ...

    async def write(self, key: str, value: str) -> None: ...

    def subscribe(self, key: str) -> AsyncIterator[str | None]: ...

    async def close(self) -> None: ...
