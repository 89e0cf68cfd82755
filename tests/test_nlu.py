"""Tests for homedash.nlu: reply parsing and the two classifier backends."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest

from homedash.config import ClassifierConfig
from homedash.dispatch import DispatchKind, dispatch
from homedash.errors import ClassifierError, ConfigError
from homedash.nlu import make_classifier
from homedash.nlu.dialogflow import DialogflowClassifier
from homedash.nlu.llm import LitellmClassifier, parse_response
from homedash.nlu.types import stringify_parameters
from homedash.store import MemoryStore


def completion_reply(content: str) -> SimpleNamespace:
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestParseResponse:
    def test_plain_json(self) -> None:
        result = parse_response(
            '{"intent": "alarm_toggle", "parameters": {"state": "on"}}'
        )
        assert result.intent == "alarm_toggle"
        assert result.parameters == {"state": "on"}

    def test_fenced_with_reasoning(self) -> None:
        content = (
            "<think>the user wants movies</think>\n"
            "```json\n"
            '{"intent": "movie_night_toggle", "parameters": {"state": "off"}}\n'
            "```"
        )
        result = parse_response(content)
        assert result.intent == "movie_night_toggle"
        assert result.parameters == {"state": "off"}

    @pytest.mark.parametrize("intent", [None, "null", "None", ""])
    def test_no_intent(self, intent: str | None) -> None:
        result = parse_response(json.dumps({"intent": intent, "parameters": {}}))
        assert result.intent is None

    def test_prose_around_object(self) -> None:
        result = parse_response(
            'Sure! {"intent": "override_toggle", "parameters": {}} Done.'
        )
        assert result.intent == "override_toggle"
        assert result.parameters == {}

    @pytest.mark.parametrize("content", ["", "no idea", "{broken"])
    def test_unusable_reply(self, content: str) -> None:
        with pytest.raises(ClassifierError):
            parse_response(content)


class TestStringifyParameters:
    def test_shapes(self) -> None:
        raw = {"state": [" on "], "empty": [], "nested": {"a": 1}, "n": 3}
        assert stringify_parameters(raw) == {"state": "on", "n": "3"}

    def test_not_a_mapping(self) -> None:
        assert stringify_parameters(None) == {}
        assert stringify_parameters(["state"]) == {}


class TestLitellmClassifier:
    def test_classify(self) -> None:
        config = ClassifierConfig(model="ollama/qwen3:4b", timeout=5.0)
        reply = completion_reply(
            '{"intent": "alarm_toggle", "parameters": {"state": "on"}}'
        )
        with patch("litellm.completion", return_value=reply) as completion:
            result = asyncio.run(
                LitellmClassifier(config).classify("turn the alarm on")
            )

        assert result.intent == "alarm_toggle"
        assert result.parameters == {"state": "on"}
        kwargs = completion.call_args.kwargs
        assert kwargs["model"] == "ollama/qwen3:4b"
        assert kwargs["temperature"] == 0
        assert kwargs["timeout"] == 5.0
        prompt = kwargs["messages"][0]["content"]
        assert 'Command: "turn the alarm on"' in prompt
        assert "movie_night_toggle" in prompt

    def test_custom_prompt(self) -> None:
        config = ClassifierConfig(prompt="Intents:\n{intents}\nText: {text}")
        reply = completion_reply('{"intent": null}')
        with patch("litellm.completion", return_value=reply) as completion:
            asyncio.run(LitellmClassifier(config).classify("hello"))

        prompt = completion.call_args.kwargs["messages"][0]["content"]
        assert prompt.startswith("Intents:\n- alarm_toggle")
        assert prompt.endswith("Text: hello")

    def test_service_failure(self) -> None:
        with patch("litellm.completion", side_effect=RuntimeError("refused")):
            with pytest.raises(ClassifierError, match="refused"):
                asyncio.run(LitellmClassifier(ClassifierConfig()).classify("x"))

    def test_requires_model(self) -> None:
        with pytest.raises(ClassifierError):
            LitellmClassifier(ClassifierConfig(model=""))


class TestDialogflowClassifier:
    CONFIG = ClassifierConfig(
        backend="dialogflow", project_id="home-agent", access_token="tok"
    )

    def _classifier(self, handler) -> DialogflowClassifier:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return DialogflowClassifier(self.CONFIG, client=client, session_id="s1")

    def test_detect_intent(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "queryResult": {
                        "intent": {"displayName": "override_toggle"},
                        "parameters": {"state": "off"},
                    }
                },
            )

        result = asyncio.run(self._classifier(handler).classify("override off"))

        assert result.intent == "override_toggle"
        assert result.parameters == {"state": "off"}
        request = requests[0]
        assert request.url.path == (
            "/v2/projects/home-agent/agent/sessions/s1:detectIntent"
        )
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == {
            "queryInput": {
                "text": {"text": "override off", "languageCode": "en-US"}
            }
        }

    def test_fallback_has_no_intent(self) -> None:
        result = asyncio.run(
            self._classifier(
                lambda r: httpx.Response(200, json={"queryResult": {}})
            ).classify("blah")
        )
        assert result.intent is None
        assert result.parameters == {}

    def test_http_error(self) -> None:
        classifier = self._classifier(lambda r: httpx.Response(503))
        with pytest.raises(ClassifierError):
            asyncio.run(classifier.classify("alarm on"))

    def test_non_json_body(self) -> None:
        classifier = self._classifier(lambda r: httpx.Response(200, content=b"<html>"))
        with pytest.raises(ClassifierError, match="non-JSON"):
            asyncio.run(classifier.classify("alarm on"))

    @pytest.mark.parametrize("body", [["unexpected"], "text", 3])
    def test_non_object_body(self, body: object) -> None:
        classifier = self._classifier(lambda r: httpx.Response(200, json=body))
        with pytest.raises(ClassifierError, match="not a JSON object"):
            asyncio.run(classifier.classify("alarm on"))

    def test_odd_query_result_shapes(self) -> None:
        body = {"queryResult": {"intent": "alarm_toggle", "parameters": []}}
        result = asyncio.run(
            self._classifier(lambda r: httpx.Response(200, json=body)).classify(
                "alarm"
            )
        )
        assert result.intent is None
        assert result.parameters == {}

    def test_dispatch_reports_unavailable_for_non_object_body(self) -> None:
        classifier = self._classifier(
            lambda r: httpx.Response(200, json=["unexpected"])
        )
        store = MemoryStore()
        outcome = asyncio.run(dispatch("alarm on", classifier, store))
        assert outcome.kind is DispatchKind.CLASSIFIER_UNAVAILABLE
        assert store.writes == []

    def test_requires_project(self) -> None:
        with pytest.raises(ClassifierError):
            DialogflowClassifier(ClassifierConfig(backend="dialogflow"))


class TestMakeClassifier:
    def test_litellm(self) -> None:
        assert isinstance(make_classifier(ClassifierConfig()), LitellmClassifier)

    def test_dialogflow(self) -> None:
        config = ClassifierConfig(backend="dialogflow", project_id="p")
        assert isinstance(make_classifier(config), DialogflowClassifier)

    def test_unknown(self) -> None:
        with pytest.raises(ConfigError):
            make_classifier(ClassifierConfig(backend="rasa"))
