"""In-process store with the same push semantics as the remote one."""

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator


class MemoryStore:
    """Dict-backed store; each subscriber gets its own queue."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._subscribers: defaultdict[
            str, list[asyncio.Queue[str | None]]
        ] = defaultdict(list)
        self.writes: list[tuple[str, str]] = []

    async def read(self, key: str) -> str | None:
        return self._values.get(key)

    async def write(self, key: str, value: str) -> None:
        self._values[key] = value
        self.writes.append((key, value))
        for queue in self._subscribers[key]:
            queue.put_nowait(value)

    async def subscribe(self, key: str) -> AsyncIterator[str | None]:
        queue: asyncio.Queue[str | None] = asyncio.Queue()
        queue.put_nowait(self._values.get(key))
        self._subscribers[key].append(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._subscribers[key].remove(queue)

    async def close(self) -> None:
        self._subscribers.clear()
