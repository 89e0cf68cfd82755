"""Firebase Realtime Database adapter over the REST streaming API.

Writes are plain ``PUT {database_url}/{key}.json`` requests. Subscriptions
open ``GET {database_url}/{key}.json`` with ``Accept: text/event-stream``;
the server answers with a ``put`` event carrying the current value and
then one ``put``/``patch`` event per change, interleaved with
``keep-alive`` events. Requests follow the 307 redirects the database
issues when a namespace is served from another host.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx

from homedash.constants import DEFAULT_RECONNECT_DELAY, DEFAULT_STORE_TIMEOUT
from homedash.env import LOGGER
from homedash.errors import StoreError


@dataclass(frozen=True, slots=True)
class ServerSentEvent:
    """One event from a text/event-stream response."""

    event: str
    data: str


async def iter_sse(lines: AsyncIterator[str]) -> AsyncIterator[ServerSentEvent]:
    """Group raw stream lines into events (blank line terminates one)."""
    event = "message"
    data: list[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if data or event != "message":
                yield ServerSentEvent(event=event, data="\n".join(data))
            event = "message"
            data = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
    if data:
        yield ServerSentEvent(event=event, data="\n".join(data))


def _coerce(data: Any) -> str | None:
    if data is None:
        return None
    if isinstance(data, str):
        return data
    return json.dumps(data)


def value_from_event(sse: ServerSentEvent) -> tuple[bool, str | None]:
    """Interpret a put/patch event for a leaf key.

    Returns ``(changed, value)``. Only events addressed at the key itself
    (path ``/``) change a leaf value.
    """
    try:
        payload = json.loads(sse.data)
    except json.JSONDecodeError as exc:
        raise StoreError(f"malformed {sse.event} payload: {sse.data!r}") from exc
    if not isinstance(payload, dict) or payload.get("path") != "/":
        return False, None
    return True, _coerce(payload.get("data"))


class FirebaseStore:
    """Realtime Database client for a handful of leaf keys."""

    def __init__(
        self,
        database_url: str,
        auth: str | None = None,
        timeout: float = DEFAULT_STORE_TIMEOUT,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not database_url:
            raise StoreError("database_url is required")
        self._base_url = database_url.rstrip("/")
        self._auth = auth
        self._timeout = timeout
        self._reconnect_delay = reconnect_delay
        self._client = client
        self._owns_client = client is None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout, follow_redirects=True
            )
        return self._client

    def _url(self, key: str) -> str:
        return f"{self._base_url}/{key}.json"

    def _params(self) -> dict[str, str]:
        return {"auth": self._auth} if self._auth else {}

    async def read(self, key: str) -> str | None:
        client = self._ensure_client()
        try:
            response = await client.get(
                self._url(key), params=self._params(), follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"read {key!r} failed: {exc}") from exc
        return _coerce(response.json())

    async def write(self, key: str, value: str) -> None:
        client = self._ensure_client()
        try:
            response = await client.put(
                self._url(key),
                params=self._params(),
                json=value,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"write {key}={value!r} failed: {exc}") from exc
        LOGGER.debug("Wrote %s=%s", key, value)

    async def subscribe(self, key: str) -> AsyncIterator[str | None]:
        """Yield the current value of *key*, then each change.

        Transport drops reconnect after ``reconnect_delay``; HTTP errors,
        ``cancel`` and ``auth_revoked`` raise StoreError.
        """
        client = self._ensure_client()
        while True:
            try:
                async with client.stream(
                    "GET",
                    self._url(key),
                    params=self._params(),
                    headers={"Accept": "text/event-stream"},
                    timeout=httpx.Timeout(self._timeout, read=None),
                    follow_redirects=True,
                ) as response:
                    if not response.is_success:
                        raise StoreError(
                            f"subscribe {key!r}: HTTP {response.status_code}"
                        )
                    async for sse in iter_sse(response.aiter_lines()):
                        if sse.event in ("put", "patch"):
                            changed, value = value_from_event(sse)
                            if changed:
                                yield value
                        elif sse.event in ("cancel", "auth_revoked"):
                            raise StoreError(
                                f"subscribe {key!r}: server sent {sse.event}"
                            )
            except httpx.TransportError as exc:
                LOGGER.warning(
                    "Stream for %r dropped (%s); reconnecting in %.1fs",
                    key,
                    exc,
                    self._reconnect_delay,
                )
            else:
                LOGGER.debug("Stream for %r closed by server", key)
            await asyncio.sleep(self._reconnect_delay)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
