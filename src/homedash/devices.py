"""Device attribute catalogue: keys, labels, intents and toggle rule."""

from dataclasses import dataclass
from typing import Final

from homedash.constants import (
    ALARM,
    INTENT_ALARM,
    INTENT_MOVIE_NIGHT,
    INTENT_OVERRIDE,
    MOVIE_NIGHT,
    OVERRIDE,
    STATE_OFF,
    STATE_ON,
)


@dataclass(frozen=True, slots=True)
class Device:
    """One toggleable attribute in the remote store."""

    key: str
    label: str
    intent: str
    acknowledgment: str


DEVICES: Final = (
    Device(
        key=ALARM,
        label="Alarm",
        intent=INTENT_ALARM,
        acknowledgment="Alarm updated via voice!",
    ),
    Device(
        key=OVERRIDE,
        label="Override",
        intent=INTENT_OVERRIDE,
        acknowledgment="Override updated via voice!",
    ),
    Device(
        key=MOVIE_NIGHT,
        label="Movie Night",
        intent=INTENT_MOVIE_NIGHT,
        acknowledgment="Movie Night mode set via voice!",
    ),
)

_BY_KEY: Final = {d.key: d for d in DEVICES}
_BY_INTENT: Final = {d.intent: d for d in DEVICES}


def device_for_key(key: str) -> Device:
    """Look up a device by store key. Raises KeyError for unknown keys."""
    return _BY_KEY[key]


def device_for_intent(intent: str) -> Device | None:
    """Return the device an intent name drives, or None if unrecognised."""
    return _BY_INTENT.get(intent)


def toggled(value: str | None) -> str:
    """Opposite of *value*: ``on`` becomes ``off``, anything else ``on``."""
    return STATE_OFF if value == STATE_ON else STATE_ON
