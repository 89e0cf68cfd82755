"""Dashboard state record and the single function that updates it.

DashboardState is immutable; every change goes through ``reduce`` so the
projection can be tested without any rendering. StateProjection owns one
subscription task per device key and serialises their deliveries onto a
single queue before reducing.
"""

import asyncio
import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from homedash.constants import DEFAULT_STATE, DEVICE_KEYS
from homedash.env import LOGGER
from homedash.errors import StoreError
from homedash.store import StateStore

Severity = Literal["information", "warning", "error"]


def _default_values() -> Mapping[str, str]:
    return MappingProxyType({key: DEFAULT_STATE for key in DEVICE_KEYS})


@dataclass(frozen=True, slots=True)
class Notice:
    """A user-visible message."""

    text: str
    severity: Severity = "information"


@dataclass(frozen=True, slots=True)
class DashboardState:
    """Snapshot of everything the dashboard displays."""

    values: Mapping[str, str] = field(default_factory=_default_values)
    transcript: str = ""
    listening: bool = False
    last_notice: Notice | None = None

    def value(self, key: str) -> str:
        return self.values.get(key, DEFAULT_STATE)


# -- Events ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValueChanged:
    """The store delivered a value (None when the key has no value)."""

    key: str
    value: str | None


@dataclass(frozen=True, slots=True)
class TranscriptChanged:
    text: str


@dataclass(frozen=True, slots=True)
class ListeningChanged:
    listening: bool


Event = ValueChanged | TranscriptChanged | ListeningChanged | Notice


def reduce(state: DashboardState, event: Event) -> DashboardState:
    """Return the state that results from applying *event*.

    Store deliveries overwrite the cached value unconditionally; an absent
    value keeps whatever was cached before.
    """
    match event:
        case ValueChanged(key=key, value=value):
            if value is None:
                return state
            values = dict(state.values)
            values[key] = value
            return dataclasses.replace(
                state, values=MappingProxyType(values)
            )
        case TranscriptChanged(text=text):
            return dataclasses.replace(state, transcript=text)
        case ListeningChanged(listening=listening):
            return dataclasses.replace(state, listening=listening)
        case Notice():
            return dataclasses.replace(state, last_notice=event)
    raise TypeError(f"unsupported event: {event!r}")


class StateProjection:
    """Mirror of the device attributes, kept current by store pushes."""

    def __init__(
        self,
        store: StateStore,
        on_event: Callable[[Event], None],
        keys: tuple[str, ...] = DEVICE_KEYS,
    ) -> None:
        self._store = store
        self._on_event = on_event
        self._keys = keys
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []

    def start(self) -> None:
        """Launch one subscription task per key plus the merge task."""
        if self._tasks:
            return
        for key in self._keys:
            self._tasks.append(
                asyncio.create_task(self._subscribe(key), name=f"sub:{key}")
            )
        self._tasks.append(
            asyncio.create_task(self._merge(), name="projection-merge")
        )

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def _subscribe(self, key: str) -> None:
        try:
            async for value in self._store.subscribe(key):
                await self._queue.put(ValueChanged(key, value))
        except StoreError as exc:
            LOGGER.warning("Subscription to %r failed: %s", key, exc)
            await self._queue.put(
                Notice(f"Lost live updates for {key}: {exc}", "warning")
            )

    async def _merge(self) -> None:
        while True:
            event = await self._queue.get()
            self._on_event(event)
