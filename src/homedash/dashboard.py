"""Dashboard controller: the seam between the hosts and the logic.

Owns the DashboardState and routes every change through ``state.reduce``:
store pushes from the projection, transcript and listening changes from
the capture session, and notices produced by toggles and dispatches.
Hosts (the Textual app, the CLI) register a listener and call the
coroutine methods from their event loop.
"""

from __future__ import annotations

from collections.abc import Callable

from homedash.capture.microphone import VoiceCapture
from homedash.capture.session import CaptureSession, CaptureState
from homedash.devices import device_for_key, toggled
from homedash.dispatch import DispatchKind, DispatchOutcome, dispatch
from homedash.env import LOGGER
from homedash.errors import CaptureBusyError, StoreError
from homedash.nlu.types import IntentClassifier
from homedash.state import (
    DashboardState,
    Event,
    ListeningChanged,
    Notice,
    Severity,
    StateProjection,
    TranscriptChanged,
    reduce,
)
from homedash.store import StateStore

StateListener = Callable[[DashboardState, Event], None]


class Dashboard:
    """Live view of the device attributes plus the voice command flow."""

    def __init__(
        self,
        store: StateStore,
        classifier: IntentClassifier | None = None,
        capture: VoiceCapture | None = None,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._capture = capture
        self._state = DashboardState()
        self._listeners: list[StateListener] = []
        self._session = CaptureSession(on_change=self._on_session_change)
        self._projection = StateProjection(store, self.apply)

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def session(self) -> CaptureSession:
        return self._session

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def apply(self, event: Event) -> None:
        """Reduce *event* into the current state and notify listeners."""
        self._state = reduce(self._state, event)
        for listener in self._listeners:
            listener(self._state, event)

    def notify(self, text: str, severity: Severity = "information") -> None:
        self.apply(Notice(text, severity))

    def _on_session_change(self, session: CaptureSession) -> None:
        if session.transcript != self._state.transcript:
            self.apply(TranscriptChanged(session.transcript))
        if session.listening != self._state.listening:
            self.apply(ListeningChanged(session.listening))

    # -- lifecycle ------------------------------------------------------

    def start(self) -> None:
        """Subscribe to the device keys. Must run inside an event loop."""
        self._projection.start()

    async def stop(self) -> None:
        await self._projection.stop()

    async def aclose(self) -> None:
        """Stop the subscriptions and release the adapters' connections."""
        await self.stop()
        if self._classifier is not None:
            await self._classifier.close()
        await self._store.close()

    # -- actions --------------------------------------------------------

    async def toggle(self, key: str) -> str | None:
        """Write the opposite of the cached value of *key*.

        The new value reaches the state only through the store's push.
        Returns the value written, or None when the write failed.
        """
        value = toggled(self._state.value(key))
        try:
            await self._store.write(key, value)
        except StoreError as exc:
            LOGGER.error("Toggle of %s failed: %s", key, exc)
            self.notify(
                f"Could not toggle {device_for_key(key).label}: {exc}", "error"
            )
            return None
        LOGGER.info("Toggled %s to %s", key, value)
        return value

    async def listen(self) -> str:
        """Run one voice-capture session and return its transcript."""
        if self._capture is None:
            self.notify("Error: voice capture is not available", "error")
            return ""
        try:
            transcript = await self._capture.run(self._session)
        except CaptureBusyError:
            self.notify("Already listening", "warning")
            return ""
        if self._session.state is CaptureState.FAILED:
            self.notify(f"Error: {self._session.error}", "error")
        elif not transcript:
            self.notify("Didn't catch that, try again.", "warning")
        return transcript

    def type_transcript(self, text: str) -> bool:
        """Use typed text as the transcript instead of a voice session.

        Returns False when a capture session is still listening.
        """
        try:
            self._session.set_transcript(text)
        except CaptureBusyError:
            self.notify("Wait for listening to finish", "warning")
            return False
        return True

    async def send(self) -> DispatchOutcome:
        """Dispatch the current transcript and report the outcome."""
        if self._classifier is None:
            outcome = DispatchOutcome(
                DispatchKind.CLASSIFIER_UNAVAILABLE,
                "No command service configured.",
            )
            self.notify(outcome.message, outcome.severity)
            return outcome
        transcript = self._session.transcript
        outcome = await dispatch(transcript, self._classifier, self._store)
        # A session may have produced a newer transcript meanwhile.
        if outcome.clear_transcript and self._session.transcript == transcript:
            self._session.clear_transcript()
        self.notify(outcome.message, outcome.severity)
        return outcome
