"""Shared test fixtures: no network, microphone or LLM needed."""

from __future__ import annotations

import asyncio
from typing import Any

import numpy as np
import pytest

from homedash.errors import ClassifierError, StoreError
from homedash.nlu.types import ClassificationResult
from homedash.store import MemoryStore


class FakeClassifier:
    """Returns a canned result and records every transcript it sees."""

    def __init__(
        self,
        result: ClassificationResult | None = None,
        error: Exception | None = None,
    ) -> None:
        self.result = result or ClassificationResult()
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    async def classify(self, transcript: str) -> ClassificationResult:
        self.calls.append(transcript)
        if self.error is not None:
            raise self.error
        return self.result

    async def close(self) -> None:
        self.closed = True


class FailingStore(MemoryStore):
    """Memory store whose writes always fail."""

    async def write(self, key: str, value: str) -> None:
        raise StoreError(f"permission denied for {key}")


class FakeRecorder:
    def __init__(
        self, audio: np.ndarray | None = None, error: Exception | None = None
    ) -> None:
        self.audio = audio if audio is not None else np.ones(16_000, dtype=np.int16)
        self.error = error

    def record(self) -> np.ndarray:
        if self.error is not None:
            raise self.error
        return self.audio


class FakeTranscriber:
    def __init__(
        self, text: str = "turn the alarm on", error: Exception | None = None
    ) -> None:
        self.text = text
        self.error = error
        self.calls = 0

    def transcribe(self, audio: np.ndarray) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


async def settle(rounds: int = 20) -> None:
    """Let queued subscription deliveries reach their consumers."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def intent(name: str | None, **params: str) -> ClassificationResult:
    return ClassificationResult(intent=name, parameters=dict(params))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def fake_classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def unavailable_classifier() -> FakeClassifier:
    return FakeClassifier(error=ClassifierError("connection refused"))


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> Any:
    """Point the config dir at tmp_path and drop override variables."""
    for name in (
        "HOMEDASH_DATABASE_URL",
        "HOMEDASH_DATABASE_AUTH",
        "HOMEDASH_NLU_MODEL",
        "HOMEDASH_DIALOGFLOW_PROJECT",
        "HOMEDASH_DIALOGFLOW_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOMEDASH_CONFIG_DIR", str(tmp_path))
    return tmp_path
