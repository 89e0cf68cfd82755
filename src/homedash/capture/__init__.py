"""Voice capture: session lifecycle, microphone recording and speech-to-text."""

from homedash.capture.session import CaptureSession, CaptureState

__all__ = ["CaptureSession", "CaptureState"]
