"""Lifecycle of one voice-capture session.

Idle -> Listening on start; Listening -> Completed on a recognition result;
Listening -> Failed on an error; Listening -> Idle when the session ends
without a result. Starting while Listening is rejected.
"""

import enum
from collections.abc import Callable, Sequence

from homedash.env import LOGGER
from homedash.errors import CaptureBusyError


class CaptureState(enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    COMPLETED = "completed"
    FAILED = "failed"


class CaptureSession:
    """Holds the live transcript and reports every state change."""

    __slots__ = ("_state", "_transcript", "_error", "_on_change")

    def __init__(
        self, on_change: Callable[["CaptureSession"], None] | None = None
    ) -> None:
        self._state = CaptureState.IDLE
        self._transcript = ""
        self._error: str | None = None
        self._on_change = on_change

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def error(self) -> str | None:
        """Reason of the last failure, None unless state is FAILED."""
        return self._error

    @property
    def listening(self) -> bool:
        return self._state is CaptureState.LISTENING

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def on_start(self) -> None:
        """Begin listening; discards any previous transcript."""
        if self._state is CaptureState.LISTENING:
            raise CaptureBusyError("already listening")
        self._state = CaptureState.LISTENING
        self._transcript = ""
        self._error = None
        LOGGER.debug("Capture session started")
        self._changed()

    def on_result(self, alternatives: Sequence[str]) -> None:
        """Keep the first-best alternative; later alternatives are ignored."""
        if self._state is not CaptureState.LISTENING:
            LOGGER.debug("Ignoring result outside a session: %r", alternatives)
            return
        self._transcript = alternatives[0].strip() if alternatives else ""
        self._state = CaptureState.COMPLETED
        LOGGER.info("Heard: %s", self._transcript)
        self._changed()

    def on_error(self, reason: str) -> None:
        self._state = CaptureState.FAILED
        self._transcript = ""
        self._error = reason
        LOGGER.error("Capture failed: %s", reason)
        self._changed()

    def on_end(self) -> None:
        if self._state is CaptureState.LISTENING:
            self._state = CaptureState.IDLE
            self._changed()
        LOGGER.debug("Capture session ended (%s)", self._state.value)

    def clear_transcript(self) -> None:
        if self._transcript:
            self._transcript = ""
            self._changed()

    def set_transcript(self, text: str) -> None:
        """Replace the transcript with typed text (keyboard entry)."""
        if self._state is CaptureState.LISTENING:
            raise CaptureBusyError("cannot edit transcript while listening")
        self._transcript = text
        self._changed()
