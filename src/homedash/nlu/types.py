"""Classification result type and the classifier protocol."""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Best-guess intent for one transcript.

    ``intent`` is None when the service found no confident match.
    """

    intent: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)
    raw: Any = None


class IntentClassifier(Protocol):
    """Anything that turns a transcript into a ClassificationResult.

    Implementations raise :class:`homedash.errors.ClassifierError` when the
    service cannot be reached or answers with something unusable.
    """

    async def classify(self, transcript: str) -> ClassificationResult: ...

    async def close(self) -> None: ...


def stringify_parameters(raw: Any) -> dict[str, str]:
    """Keep scalar parameters as strings; drop empty and nested values."""
    if not isinstance(raw, dict):
        return {}
    params: dict[str, str] = {}
    for name, value in raw.items():
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None or isinstance(value, dict):
            continue
        params[str(name)] = str(value).strip()
    return params
