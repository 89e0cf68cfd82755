"""Application-level configuration.

Loaded from ``~/.config/homedash/config.json``; endpoint and secret values
can be overridden from the environment so credentials stay out of the file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from homedash.constants import (
    DEFAULT_CLASSIFIER_BACKEND,
    DEFAULT_CLASSIFIER_TIMEOUT,
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_DIR_ENV,
    DEFAULT_CONFIG_FILE,
    DEFAULT_ENERGY_THRESHOLD,
    DEFAULT_MAX_CAPTURE_SECONDS,
    DEFAULT_NLU_LANGUAGE,
    DEFAULT_NLU_MODEL,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_STORE_TIMEOUT,
    DEFAULT_STT_LANGUAGE,
    DEFAULT_STT_MODEL,
    DEFAULT_VAD_FRAME_MS,
    DEFAULT_VAD_MODE,
    DEFAULT_VAD_SILENCE_MS,
)
from homedash.env import LOGGER
from homedash.errors import ConfigError

_BACKENDS = ("litellm", "dialogflow")
_VAD_FRAME_MS = (10, 20, 30)


# ---------------------------------------------------------------------------
# Nested config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Realtime database connection."""

    database_url: str = ""
    auth: str | None = None
    timeout: float = DEFAULT_STORE_TIMEOUT
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY


@dataclass(frozen=True, slots=True)
class ClassifierConfig:
    """Intent classifier backend settings."""

    backend: str = DEFAULT_CLASSIFIER_BACKEND
    model: str = DEFAULT_NLU_MODEL
    prompt: str | None = None
    project_id: str | None = None
    access_token: str | None = None
    language: str = DEFAULT_NLU_LANGUAGE
    timeout: float = DEFAULT_CLASSIFIER_TIMEOUT


@dataclass(frozen=True, slots=True)
class CaptureConfig:
    """Microphone recording and speech-to-text settings."""

    model: str = DEFAULT_STT_MODEL
    language: str = DEFAULT_STT_LANGUAGE
    device: int | None = None
    vad_mode: int = DEFAULT_VAD_MODE
    vad_frame_ms: int = DEFAULT_VAD_FRAME_MS
    vad_silence_ms: int = DEFAULT_VAD_SILENCE_MS
    energy_threshold: float = DEFAULT_ENERGY_THRESHOLD
    max_seconds: int = DEFAULT_MAX_CAPTURE_SECONDS


@dataclass(frozen=True, slots=True)
class HomedashConfig:
    """Top-level configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)


# ---------------------------------------------------------------------------
# Config loading helpers
# ---------------------------------------------------------------------------


def config_dir() -> Path:
    return Path(
        os.environ.get(DEFAULT_CONFIG_DIR_ENV, "") or DEFAULT_CONFIG_DIR,
    ).expanduser()


def _resolve_config_path(base: Path, path_str: str) -> Path:
    """Resolve a path relative to *base*. Absolute paths used as-is."""
    p = Path(path_str).expanduser()
    if p.is_absolute():
        return p
    return base / p


def _resolve_prompt(base: Path, section: dict[str, Any]) -> str | None:
    """Resolve ``prompt`` / ``prompt_file`` from the classifier section."""
    prompt = section.get("prompt")
    prompt_file = section.get("prompt_file")
    if prompt and prompt_file:
        LOGGER.debug("Both 'prompt' and 'prompt_file' set; using 'prompt_file'")
    if prompt_file:
        path = _resolve_config_path(base, str(prompt_file))
        try:
            return path.read_text().strip()
        except OSError as exc:
            raise ConfigError(f"cannot read prompt_file {path}: {exc}") from exc
    if prompt:
        return str(prompt)
    return None


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"'{name}' must be an object")
    return raw


def _number(section: dict[str, Any], key: str, default: float, name: str) -> float:
    raw = section.get(key, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}.{key} must be a number, got {raw!r}") from exc


def _integer(section: dict[str, Any], key: str, default: int, name: str) -> int:
    raw = section.get(key, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}.{key} must be an integer, got {raw!r}") from exc


def _env(name: str, fallback: str | None) -> str | None:
    return os.environ.get(name) or fallback


def _validate_capture(capture: CaptureConfig) -> None:
    """Reject values the VAD and recorder cannot run with."""
    if capture.vad_frame_ms not in _VAD_FRAME_MS:
        raise ConfigError(
            f"capture.vad_frame_ms must be one of {_VAD_FRAME_MS}, "
            f"got {capture.vad_frame_ms}"
        )
    if not 0 <= capture.vad_mode <= 3:
        raise ConfigError(
            f"capture.vad_mode must be between 0 and 3, got {capture.vad_mode}"
        )
    if capture.max_seconds <= 0:
        raise ConfigError(
            f"capture.max_seconds must be positive, got {capture.max_seconds}"
        )


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(path: str | None = None) -> HomedashConfig:
    """Load homedash configuration from a JSON file.

    Reads ``~/.config/homedash/config.json`` (or *path*). The
    ``HOMEDASH_CONFIG_DIR`` environment variable overrides the config
    directory, and relative ``prompt_file`` paths resolve against it.
    ``HOMEDASH_DATABASE_URL``, ``HOMEDASH_DATABASE_AUTH``,
    ``HOMEDASH_NLU_MODEL``, ``HOMEDASH_DIALOGFLOW_PROJECT`` and
    ``HOMEDASH_DIALOGFLOW_TOKEN`` take precedence over file values.

    A missing file yields defaults plus environment overrides.
    """
    base = config_dir()
    config_path = Path(path).expanduser() if path else base / DEFAULT_CONFIG_FILE

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                loaded = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_path}: top level must be an object")
        data = loaded
    elif path:
        raise ConfigError(f"config file not found: {config_path}")

    # -- store -------------------------------------------------------------
    store_raw = _section(data, "store")
    store = StoreConfig(
        database_url=_env("HOMEDASH_DATABASE_URL", store_raw.get("database_url")) or "",
        auth=_env("HOMEDASH_DATABASE_AUTH", store_raw.get("auth")),
        timeout=_number(store_raw, "timeout", DEFAULT_STORE_TIMEOUT, "store"),
        reconnect_delay=_number(
            store_raw, "reconnect_delay", DEFAULT_RECONNECT_DELAY, "store"
        ),
    )

    # -- classifier --------------------------------------------------------
    clf_raw = _section(data, "classifier")
    backend = str(clf_raw.get("backend", DEFAULT_CLASSIFIER_BACKEND))
    if backend not in _BACKENDS:
        raise ConfigError(
            f"classifier.backend must be one of {_BACKENDS}, got {backend!r}"
        )
    classifier = ClassifierConfig(
        backend=backend,
        model=_env("HOMEDASH_NLU_MODEL", clf_raw.get("model")) or DEFAULT_NLU_MODEL,
        prompt=_resolve_prompt(base, clf_raw),
        project_id=_env("HOMEDASH_DIALOGFLOW_PROJECT", clf_raw.get("project_id")),
        access_token=_env("HOMEDASH_DIALOGFLOW_TOKEN", clf_raw.get("access_token")),
        language=str(clf_raw.get("language", DEFAULT_NLU_LANGUAGE)),
        timeout=_number(
            clf_raw, "timeout", DEFAULT_CLASSIFIER_TIMEOUT, "classifier"
        ),
    )

    # -- capture -----------------------------------------------------------
    cap_raw = _section(data, "capture")
    device = cap_raw.get("device")
    capture = CaptureConfig(
        model=str(cap_raw.get("model", DEFAULT_STT_MODEL)),
        language=str(cap_raw.get("language", DEFAULT_STT_LANGUAGE)),
        device=None if device is None else _integer(cap_raw, "device", 0, "capture"),
        vad_mode=_integer(cap_raw, "vad_mode", DEFAULT_VAD_MODE, "capture"),
        vad_frame_ms=_integer(
            cap_raw, "vad_frame_ms", DEFAULT_VAD_FRAME_MS, "capture"
        ),
        vad_silence_ms=_integer(
            cap_raw, "vad_silence_ms", DEFAULT_VAD_SILENCE_MS, "capture"
        ),
        energy_threshold=_number(
            cap_raw, "energy_threshold", DEFAULT_ENERGY_THRESHOLD, "capture"
        ),
        max_seconds=_integer(
            cap_raw, "max_seconds", DEFAULT_MAX_CAPTURE_SECONDS, "capture"
        ),
    )

    _validate_capture(capture)

    return HomedashConfig(store=store, classifier=classifier, capture=capture)
