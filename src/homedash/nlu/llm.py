"""LLM-backed intent classification.

Uses litellm for provider-agnostic LLM access (Ollama, OpenAI, Claude, etc.).
The model is asked for a single JSON object naming one of the known
intents and its ``state`` parameter.
"""

import asyncio
import json
import re
from typing import Any, Final

from homedash.config import ClassifierConfig
from homedash.constants import DEFAULT_NLU_MAX_TOKENS
from homedash.devices import DEVICES
from homedash.env import LOGGER
from homedash.errors import ClassifierError
from homedash.nlu.types import ClassificationResult, stringify_parameters

INTENT_PROMPT: Final = """You map home-automation voice commands to intents.

Known intents:
{intents}

Reply with exactly one JSON object and nothing else:
{{"intent": "<intent name or null>", "parameters": {{"state": "on" or "off"}}}}

Use null for "intent" when the command matches none of the known intents.
Omit "state" when the command does not say whether to switch on or off.

Command: "{text}" /no_think"""

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def _intent_lines() -> str:
    return "\n".join(
        f"- {d.intent}: switch the {d.label.lower()} on or off" for d in DEVICES
    )


def parse_response(content: str) -> ClassificationResult:
    """Extract the JSON object from a model reply.

    Raises ClassifierError when no object can be decoded.
    """
    # Strip reasoning tags some models emit.
    content = re.sub(r"<think>.*?</think>", "", content, flags=re.DOTALL)
    content = _FENCE.sub("", content.strip())
    start, end = content.find("{"), content.rfind("}")
    if start < 0 or end <= start:
        raise ClassifierError(f"no JSON object in reply: {content[:80]!r}")
    try:
        data = json.loads(content[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ClassifierError(f"invalid JSON in reply: {exc}") from exc
    if not isinstance(data, dict):
        raise ClassifierError("reply is not a JSON object")

    intent = data.get("intent")
    if not isinstance(intent, str) or intent.strip().lower() in ("", "null", "none"):
        intent = None
    else:
        intent = intent.strip()
    return ClassificationResult(
        intent=intent,
        parameters=stringify_parameters(data.get("parameters")),
        raw=data,
    )


class LitellmClassifier:
    """Classify transcripts with a chat model through litellm."""

    def __init__(self, config: ClassifierConfig) -> None:
        if not config.model:
            raise ClassifierError("no classifier model configured")
        self._config = config

    def _complete(self, transcript: str) -> str:
        """Blocking completion call, run via ``asyncio.to_thread``."""
        from litellm import completion  # deferred import

        template = self._config.prompt or INTENT_PROMPT
        messages = [
            {
                "role": "user",
                "content": template.format(
                    text=transcript, intents=_intent_lines()
                ),
            }
        ]
        kwargs: dict[str, Any] = {}
        if self._config.timeout:
            kwargs["timeout"] = self._config.timeout
        response = completion(
            model=self._config.model,
            messages=messages,
            max_tokens=DEFAULT_NLU_MAX_TOKENS,
            temperature=0,
            **kwargs,
        )
        return response.choices[0].message.content or ""

    async def classify(self, transcript: str) -> ClassificationResult:
        try:
            content = await asyncio.to_thread(self._complete, transcript)
        except ClassifierError:
            raise
        except Exception as exc:
            raise ClassifierError(
                f"{self._config.model} unavailable: {exc}"
            ) from exc
        result = parse_response(content)
        LOGGER.debug(
            "Classified %r as %s %s", transcript, result.intent, result.parameters
        )
        return result

    async def close(self) -> None:
        pass
