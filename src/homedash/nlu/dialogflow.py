"""Dialogflow ES intent detection over REST.

Sends the transcript to ``projects/{project}/agent/sessions/{session}:detectIntent``
and reads ``queryResult.intent.displayName`` and ``queryResult.parameters``.
The access token is an OAuth bearer token for the project's agent
(e.g. from ``gcloud auth print-access-token``).
"""

from __future__ import annotations

import uuid

import httpx

from homedash.config import ClassifierConfig
from homedash.constants import DIALOGFLOW_API_URL
from homedash.env import LOGGER
from homedash.errors import ClassifierError
from homedash.nlu.types import ClassificationResult, stringify_parameters


class DialogflowClassifier:
    """Async client for one Dialogflow agent session."""

    def __init__(
        self,
        config: ClassifierConfig,
        client: httpx.AsyncClient | None = None,
        session_id: str | None = None,
    ) -> None:
        if not config.project_id:
            raise ClassifierError("dialogflow backend needs a project_id")
        self._config = config
        self._client = client
        self._session_id = session_id or uuid.uuid4().hex

    @property
    def endpoint(self) -> str:
        return (
            f"{DIALOGFLOW_API_URL}/projects/{self._config.project_id}"
            f"/agent/sessions/{self._session_id}:detectIntent"
        )

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._client

    async def classify(self, transcript: str) -> ClassificationResult:
        client = self._ensure_client()
        headers = {}
        if self._config.access_token:
            headers["Authorization"] = f"Bearer {self._config.access_token}"
        payload = {
            "queryInput": {
                "text": {
                    "text": transcript,
                    "languageCode": self._config.language,
                }
            }
        }
        try:
            response = await client.post(
                self.endpoint, json=payload, headers=headers
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise ClassifierError(f"Dialogflow unavailable: {exc}") from exc
        except ValueError as exc:
            raise ClassifierError("Dialogflow returned non-JSON body") from exc
        if not isinstance(data, dict):
            raise ClassifierError("Dialogflow reply is not a JSON object")

        query_result = data.get("queryResult")
        if not isinstance(query_result, dict):
            query_result = {}
        matched = query_result.get("intent")
        intent = None
        if isinstance(matched, dict):
            intent = matched.get("displayName") or None
        LOGGER.debug("Dialogflow result: %s", query_result)
        return ClassificationResult(
            intent=intent,
            parameters=stringify_parameters(query_result.get("parameters")),
            raw=query_result,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
