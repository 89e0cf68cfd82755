"""Record one spoken command and turn it into text.

MicrophoneRecorder owns the audio device for a single utterance: it reads
int16 frames from sounddevice, gates near-silent frames, and stops once the
VAD reports the speaker has finished (or the time limit is reached).
SpeechToText sends the recording to a transcription model via litellm.
VoiceCapture drives a CaptureSession through that sequence.
"""

from __future__ import annotations

import asyncio
import io
import wave
from typing import Any, Protocol

import numpy as np

from homedash.capture.session import CaptureSession
from homedash.capture.vad import VadConfig, VoiceActivityDetector
from homedash.config import CaptureConfig
from homedash.constants import DEFAULT_SAMPLE_RATE
from homedash.env import LOGGER
from homedash.errors import CaptureError

# Shorter recordings are treated as "no speech".
_MIN_SECONDS = 0.3


class Recorder(Protocol):
    def record(self) -> np.ndarray: ...


class Transcriber(Protocol):
    def transcribe(self, audio: np.ndarray) -> str: ...


def encode_wav(audio: np.ndarray, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bytes:
    """Wrap mono int16 samples in a WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(audio.astype(np.int16).tobytes())
    return buf.getvalue()


def frame_rms(frame: np.ndarray) -> float:
    return float(np.sqrt(np.mean(frame.astype(np.float32) ** 2)))


class MicrophoneRecorder:
    """Blocking single-utterance recorder, run via ``asyncio.to_thread``."""

    def __init__(self, config: CaptureConfig) -> None:
        self._config = config
        self._sample_rate = DEFAULT_SAMPLE_RATE
        self._vad_config = VadConfig(
            frame_ms=config.vad_frame_ms,
            mode=config.vad_mode,
            silence_ms=config.vad_silence_ms,
            sample_rate=self._sample_rate,
        )

    def record(self) -> np.ndarray:
        """Record until end of speech; returns int16 samples.

        Raises CaptureError("audio-capture") when no input device is usable.
        """
        try:
            import sounddevice as sd
        except OSError as exc:
            raise CaptureError("audio-capture") from exc

        frames: list[np.ndarray] = []
        vad = VoiceActivityDetector(self._vad_config)
        frame_samples = self._vad_config.frame_samples
        max_frames = int(
            self._config.max_seconds * self._sample_rate / frame_samples
        )
        stream_kwargs: dict[str, Any] = {}
        if self._config.device is not None:
            stream_kwargs["device"] = self._config.device

        try:
            with sd.InputStream(
                samplerate=self._sample_rate,
                blocksize=frame_samples,
                channels=1,
                dtype="int16",
                **stream_kwargs,
            ) as stream:
                for _ in range(max_frames):
                    data, overflowed = stream.read(frame_samples)
                    if overflowed:
                        LOGGER.debug("Input overflow while recording")
                    frame = data.reshape(-1)
                    frames.append(frame.copy())
                    # RMS energy gate: quiet frames count as silence for VAD
                    if frame_rms(frame) < self._config.energy_threshold:
                        frame = np.zeros_like(frame)
                    if vad.process(frame):
                        break
        except (sd.PortAudioError, ValueError) as exc:
            raise CaptureError("audio-capture") from exc

        if not vad.speech_detected or not frames:
            return np.array([], dtype=np.int16)
        return np.concatenate(frames)


class SpeechToText:
    """Transcribe recordings with a hosted speech model through litellm."""

    def __init__(self, config: CaptureConfig) -> None:
        self._config = config

    def transcribe(self, audio: np.ndarray) -> str:
        """Blocking transcription call, run via ``asyncio.to_thread``."""
        from litellm import transcription  # deferred import

        audio_file = io.BytesIO(encode_wav(audio))
        audio_file.name = "command.wav"
        response = transcription(
            model=self._config.model,
            file=audio_file,
            language=self._config.language,
        )
        return (response.text or "").strip()


class VoiceCapture:
    """Run one capture session: record, transcribe, report to the session."""

    def __init__(
        self,
        recorder: Recorder,
        transcriber: Transcriber,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
    ) -> None:
        self._recorder = recorder
        self._transcriber = transcriber
        self._sample_rate = sample_rate

    @classmethod
    def from_config(cls, config: CaptureConfig) -> VoiceCapture:
        return cls(MicrophoneRecorder(config), SpeechToText(config))

    async def run(self, session: CaptureSession) -> str:
        """Capture one transcript into *session* and return it.

        Raises CaptureBusyError if *session* is already listening; every
        other failure is reported through ``session.on_error``.
        """
        session.on_start()
        try:
            audio = await asyncio.to_thread(self._recorder.record)
        except CaptureError as exc:
            session.on_error(str(exc))
            return ""

        if audio.size < self._sample_rate * _MIN_SECONDS:
            LOGGER.info("No speech detected")
            session.on_end()
            return ""

        try:
            text = await asyncio.to_thread(self._transcriber.transcribe, audio)
        except Exception as exc:
            session.on_error(f"network: {exc}")
            return ""

        if text:
            session.on_result([text])
        session.on_end()
        return session.transcript
