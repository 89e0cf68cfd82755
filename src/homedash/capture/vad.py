"""Voice Activity Detection using WebRTC VAD.

Tracks speech/silence boundaries to detect when the speaker has finished
a command, based on consecutive silence frames exceeding a threshold.
"""

import math
from dataclasses import dataclass

import numpy as np
import webrtcvad


@dataclass(frozen=True, slots=True)
class VadConfig:
    """Immutable VAD configuration."""

    frame_ms: int = 30
    mode: int = 3
    silence_ms: int = 700
    sample_rate: int = 16_000

    def __post_init__(self) -> None:
        if self.frame_ms not in (10, 20, 30):
            raise ValueError("frame_ms must be one of: 10, 20, 30")
        if not (0 <= self.mode <= 3):
            raise ValueError("mode must be between 0 and 3")

    @property
    def frame_samples(self) -> int:
        return int(self.sample_rate * self.frame_ms / 1000)


class VoiceActivityDetector:
    """WebRTC VAD state machine for end-of-utterance detection."""

    __slots__ = (
        "_vad",
        "_config",
        "_silence_threshold",
        "_speech_detected",
        "_silence_count",
    )

    def __init__(self, config: VadConfig) -> None:
        self._config = config
        self._vad = webrtcvad.Vad(config.mode)
        self._silence_threshold = int(math.ceil(config.silence_ms / config.frame_ms))
        self._speech_detected = False
        self._silence_count = 0

    @property
    def speech_detected(self) -> bool:
        """Whether any speech has been heard in this utterance."""
        return self._speech_detected

    def process(self, frame: np.ndarray) -> bool:
        """Feed exactly one VAD frame; return True once the utterance ended.

        An utterance ends when speech was detected and then enough
        consecutive silence frames have accumulated.
        """
        if frame.size != self._config.frame_samples:
            raise ValueError(
                f"expected {self._config.frame_samples} samples, got {frame.size}"
            )
        if self._vad.is_speech(frame.tobytes(), self._config.sample_rate):
            self._speech_detected = True
            self._silence_count = 0
            return False
        if not self._speech_detected:
            return False
        self._silence_count += 1
        return self._silence_count >= self._silence_threshold
