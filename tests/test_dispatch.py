"""Tests for homedash.dispatch: voice command to store write."""

from __future__ import annotations

import asyncio

import pytest

from homedash.dispatch import (
    DispatchKind,
    DispatchOutcome,
    dispatch,
    resolve_intent,
)
from homedash.store import MemoryStore

from .conftest import FailingStore, FakeClassifier, intent

_RECOGNISED = [
    ("alarm_toggle", "alarm"),
    ("override_toggle", "override"),
    ("movie_night_toggle", "movie_night"),
]


class TestResolveIntent:
    def test_absent_intent(self) -> None:
        resolution = resolve_intent(intent(None))
        assert resolution.kind is DispatchKind.NO_INTENT
        assert resolution.message == "No intent detected."
        assert resolution.key is None

    def test_empty_intent_counts_as_absent(self) -> None:
        assert resolve_intent(intent("")).kind is DispatchKind.NO_INTENT

    @pytest.mark.parametrize(
        "name", ["lights_on", "ALARM_TOGGLE", "Default Fallback Intent"]
    )
    def test_unknown_intent(self, name: str) -> None:
        resolution = resolve_intent(intent(name, state="on"))
        assert resolution.kind is DispatchKind.UNKNOWN_COMMAND
        assert resolution.message == f"Unknown command: {name}"
        assert resolution.value is None

    @pytest.mark.parametrize(("name", "key"), _RECOGNISED)
    def test_recognised_intent_maps_to_key(self, name: str, key: str) -> None:
        resolution = resolve_intent(intent(name, state="off"))
        assert resolution.kind is DispatchKind.APPLIED
        assert (resolution.key, resolution.value) == (key, "off")

    @pytest.mark.parametrize(("name", "key"), _RECOGNISED)
    def test_missing_state(self, name: str, key: str) -> None:
        resolution = resolve_intent(intent(name))
        assert resolution.kind is DispatchKind.MISSING_STATE
        assert resolution.key == key
        assert resolution.value is None

    def test_empty_state_is_missing(self) -> None:
        resolution = resolve_intent(intent("alarm_toggle", state=""))
        assert resolution.kind is DispatchKind.MISSING_STATE

    def test_state_value_is_not_validated(self) -> None:
        resolution = resolve_intent(intent("alarm_toggle", state="maybe"))
        assert resolution.kind is DispatchKind.APPLIED
        assert resolution.value == "maybe"

    def test_acknowledgments(self) -> None:
        assert resolve_intent(intent("alarm_toggle", state="on")).message == (
            "Alarm updated via voice!"
        )
        assert resolve_intent(intent("movie_night_toggle", state="on")).message == (
            "Movie Night mode set via voice!"
        )


class TestDispatch:
    def test_turn_the_alarm_on(self, store: MemoryStore) -> None:
        classifier = FakeClassifier(intent("alarm_toggle", state="on"))
        outcome = asyncio.run(dispatch("turn the alarm on", classifier, store))
        assert outcome.ok
        assert store.writes == [("alarm", "on")]
        assert classifier.calls == ["turn the alarm on"]
        assert outcome.clear_transcript

    def test_gibberish_has_no_intent(self, store: MemoryStore) -> None:
        classifier = FakeClassifier(intent(None))
        outcome = asyncio.run(dispatch("gibberish", classifier, store))
        assert outcome.kind is DispatchKind.NO_INTENT
        assert outcome.message == "No intent detected."
        assert store.writes == []
        assert outcome.clear_transcript

    def test_unknown_command(self, store: MemoryStore) -> None:
        classifier = FakeClassifier(intent("lights_on", state="on"))
        outcome = asyncio.run(dispatch("lights on", classifier, store))
        assert outcome.kind is DispatchKind.UNKNOWN_COMMAND
        assert outcome.message == "Unknown command: lights_on"
        assert outcome.intent == "lights_on"
        assert store.writes == []
        assert outcome.clear_transcript

    @pytest.mark.parametrize(("name", "key"), _RECOGNISED)
    @pytest.mark.parametrize("value", ["on", "off"])
    def test_recognised_writes_exactly_once(
        self, store: MemoryStore, name: str, key: str, value: str
    ) -> None:
        classifier = FakeClassifier(intent(name, state=value))
        outcome = asyncio.run(dispatch("command", classifier, store))
        assert store.writes == [(key, value)]
        assert (outcome.key, outcome.value) == (key, value)

    @pytest.mark.parametrize(("name", "key"), _RECOGNISED)
    def test_missing_state_writes_nothing(
        self, store: MemoryStore, name: str, key: str
    ) -> None:
        classifier = FakeClassifier(intent(name))
        outcome = asyncio.run(dispatch("turn it", classifier, store))
        assert outcome.kind is DispatchKind.MISSING_STATE
        assert outcome.severity == "warning"
        assert store.writes == []
        assert outcome.clear_transcript

    @pytest.mark.parametrize("transcript", ["", "   ", "\n\t"])
    def test_empty_transcript_skips_classifier(
        self, store: MemoryStore, fake_classifier: FakeClassifier, transcript: str
    ) -> None:
        outcome = asyncio.run(dispatch(transcript, fake_classifier, store))
        assert outcome.kind is DispatchKind.EMPTY_TRANSCRIPT
        assert fake_classifier.calls == []
        assert store.writes == []
        assert not outcome.clear_transcript

    def test_classifier_failure_is_distinct_from_no_intent(
        self, store: MemoryStore, unavailable_classifier: FakeClassifier
    ) -> None:
        outcome = asyncio.run(dispatch("alarm on", unavailable_classifier, store))
        assert outcome.kind is DispatchKind.CLASSIFIER_UNAVAILABLE
        assert "connection refused" in outcome.message
        assert outcome.severity == "error"
        assert store.writes == []
        assert outcome.clear_transcript

    def test_store_failure_is_reported(self) -> None:
        classifier = FakeClassifier(intent("override_toggle", state="on"))
        outcome = asyncio.run(dispatch("override on", classifier, FailingStore()))
        assert outcome.kind is DispatchKind.STORE_ERROR
        assert not outcome.ok
        assert "permission denied" in outcome.message
        assert outcome.clear_transcript


class TestDispatchOutcome:
    def test_frozen(self) -> None:
        outcome = DispatchOutcome(DispatchKind.NO_INTENT, "x")
        with pytest.raises(AttributeError):
            outcome.message = "y"

    def test_only_applied_is_ok(self) -> None:
        for kind in DispatchKind:
            assert DispatchOutcome(kind, "").ok is (kind is DispatchKind.APPLIED)
