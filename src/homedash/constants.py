"""Default configuration values for homedash."""

from typing import Final

# Device attributes and their two conventional states
ALARM: Final = "alarm"
OVERRIDE: Final = "override"
MOVIE_NIGHT: Final = "movie_night"
DEVICE_KEYS: Final = (ALARM, OVERRIDE, MOVIE_NIGHT)
STATE_ON: Final = "on"
STATE_OFF: Final = "off"
DEFAULT_STATE: Final = STATE_OFF

# Intent names produced by the NLU service
INTENT_ALARM: Final = "alarm_toggle"
INTENT_OVERRIDE: Final = "override_toggle"
INTENT_MOVIE_NIGHT: Final = "movie_night_toggle"
STATE_PARAMETER: Final = "state"

# Remote store
DEFAULT_STORE_TIMEOUT: Final = 10.0
DEFAULT_RECONNECT_DELAY: Final = 2.0

# Classifier
DEFAULT_CLASSIFIER_BACKEND: Final = "litellm"
DEFAULT_NLU_MODEL: Final = "openai/gpt-4o-mini"
DEFAULT_NLU_MAX_TOKENS: Final = 200
DEFAULT_NLU_LANGUAGE: Final = "en-US"
DEFAULT_CLASSIFIER_TIMEOUT: Final = 10.0
DIALOGFLOW_API_URL: Final = "https://dialogflow.googleapis.com/v2"

# Voice capture
DEFAULT_STT_MODEL: Final = "whisper-1"
DEFAULT_STT_LANGUAGE: Final = "en"
DEFAULT_SAMPLE_RATE: Final = 16_000
DEFAULT_VAD_FRAME_MS: Final = 30
DEFAULT_VAD_MODE: Final = 3
DEFAULT_VAD_SILENCE_MS: Final = 700
DEFAULT_ENERGY_THRESHOLD: Final = 300.0
DEFAULT_MAX_CAPTURE_SECONDS: Final = 10

# Config file
DEFAULT_CONFIG_DIR: Final = "~/.config/homedash"
DEFAULT_CONFIG_DIR_ENV: Final = "HOMEDASH_CONFIG_DIR"
DEFAULT_CONFIG_FILE: Final = "config.json"
