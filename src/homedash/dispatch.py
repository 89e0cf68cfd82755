"""Translate a classified voice command into at most one store write.

``resolve_intent`` is pure: it decides, from a ClassificationResult alone,
which key/value (if any) should be written. ``dispatch`` runs the whole
round trip (validate transcript, classify, resolve, write) and reports
the result as a DispatchOutcome value instead of raising.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from homedash.constants import STATE_OFF, STATE_ON, STATE_PARAMETER
from homedash.devices import device_for_intent
from homedash.env import LOGGER
from homedash.errors import ClassifierError, StoreError
from homedash.nlu.types import ClassificationResult, IntentClassifier
from homedash.store import StateStore


class DispatchKind(enum.Enum):
    APPLIED = "applied"
    EMPTY_TRANSCRIPT = "empty_transcript"
    CLASSIFIER_UNAVAILABLE = "classifier_unavailable"
    NO_INTENT = "no_intent"
    UNKNOWN_COMMAND = "unknown_command"
    MISSING_STATE = "missing_state"
    STORE_ERROR = "store_error"


_SEVERITY = {
    DispatchKind.APPLIED: "information",
    DispatchKind.EMPTY_TRANSCRIPT: "warning",
    DispatchKind.CLASSIFIER_UNAVAILABLE: "error",
    DispatchKind.NO_INTENT: "warning",
    DispatchKind.UNKNOWN_COMMAND: "warning",
    DispatchKind.MISSING_STATE: "warning",
    DispatchKind.STORE_ERROR: "error",
}


@dataclass(frozen=True, slots=True)
class Resolution:
    """What a ClassificationResult asks for: a write, or a refusal."""

    kind: DispatchKind
    message: str
    key: str | None = None
    value: str | None = None


@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    """Immutable result of one dispatch call.

    ``clear_transcript`` is True for every outcome reached after the
    classifier was consulted; only an empty transcript keeps it.
    """

    kind: DispatchKind
    message: str
    key: str | None = None
    value: str | None = None
    intent: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is DispatchKind.APPLIED

    @property
    def severity(self) -> str:
        return _SEVERITY[self.kind]

    @property
    def clear_transcript(self) -> bool:
        return self.kind is not DispatchKind.EMPTY_TRANSCRIPT


def resolve_intent(result: ClassificationResult) -> Resolution:
    """Map a classification to the write it implies."""
    if not result.intent:
        return Resolution(DispatchKind.NO_INTENT, "No intent detected.")

    device = device_for_intent(result.intent)
    if device is None:
        return Resolution(
            DispatchKind.UNKNOWN_COMMAND, f"Unknown command: {result.intent}"
        )

    value = result.parameters.get(STATE_PARAMETER, "")
    if not value:
        return Resolution(
            DispatchKind.MISSING_STATE,
            f"Heard {device.label.lower()} but not whether to turn it on or off.",
            key=device.key,
        )
    return Resolution(
        DispatchKind.APPLIED, device.acknowledgment, key=device.key, value=value
    )


async def dispatch(
    transcript: str,
    classifier: IntentClassifier,
    store: StateStore,
) -> DispatchOutcome:
    """Classify *transcript* and apply the resulting write, if any."""
    if not transcript.strip():
        return DispatchOutcome(
            DispatchKind.EMPTY_TRANSCRIPT,
            "Say something before sending a command.",
        )

    try:
        result = await classifier.classify(transcript)
    except ClassifierError as exc:
        LOGGER.warning("Classifier failed for %r: %s", transcript, exc)
        return DispatchOutcome(
            DispatchKind.CLASSIFIER_UNAVAILABLE,
            f"Command service unavailable: {exc}",
        )

    resolution = resolve_intent(result)
    if resolution.kind is not DispatchKind.APPLIED:
        LOGGER.info("Not dispatching %r: %s", transcript, resolution.message)
        return DispatchOutcome(
            resolution.kind,
            resolution.message,
            key=resolution.key,
            intent=result.intent,
        )

    assert resolution.key is not None and resolution.value is not None
    if resolution.value not in (STATE_ON, STATE_OFF):
        LOGGER.warning(
            "Writing non on/off value %r to %s", resolution.value, resolution.key
        )
    try:
        await store.write(resolution.key, resolution.value)
    except StoreError as exc:
        LOGGER.error("Voice write failed: %s", exc)
        return DispatchOutcome(
            DispatchKind.STORE_ERROR,
            f"Could not update {resolution.key}: {exc}",
            key=resolution.key,
            value=resolution.value,
            intent=result.intent,
        )

    LOGGER.info("Voice set %s=%s", resolution.key, resolution.value)
    return DispatchOutcome(
        DispatchKind.APPLIED,
        resolution.message,
        key=resolution.key,
        value=resolution.value,
        intent=result.intent,
    )
