"""OpenAI-compatible chat-completions backend (Groq by default)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from moodshift.config import settings
from moodshift.llm.base import (
    ChatBackend,
    LLMAuthError,
    LLMError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from moodshift.remote_config import LLMConfig

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 10.0


class ChatCompletionBackend(ChatBackend):
    """Thin async client for a hosted ``/chat/completions`` endpoint.

    The endpoint URL, model and sampling parameters come from the runtime
    ``LLMConfig`` on every call, so a config change takes effect without a
    restart. Only the API key is fixed at construction.
    """

    def __init__(
        self,
        api_key: str = settings.groq_api_key,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._calls = 0
        self._failures = 0

    @property
    def backend_name(self) -> str:
        return "chat_completions"

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(_DEFAULT_TIMEOUT_S, connect=5.0),
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def complete(
        self,
        messages: list[dict[str, str]],
        config: LLMConfig,
        *,
        temperature: float | None = None,
        frequency_penalty: float | None = None,
        presence_penalty: float | None = None,
    ) -> str:
        if not self._api_key:
            raise LLMAuthError("llm_api_key_missing")
        if not config.api_url or not config.model:
            raise LLMError("llm config is missing apiUrl or model")
        await self.start()
        assert self._client is not None

        body = _request_body(
            config,
            messages,
            temperature=temperature,
            frequency_penalty=frequency_penalty,
            presence_penalty=presence_penalty,
        )
        timeout = (
            httpx.Timeout(config.timeout_seconds, connect=5.0)
            if config.timeout_seconds
            else httpx.USE_CLIENT_DEFAULT
        )

        self._calls += 1
        log.debug(
            "Calling %s model=%s messages=%d",
            config.api_url,
            config.model,
            len(messages),
        )
        try:
            try:
                resp = await self._client.post(
                    config.api_url,
                    json=body,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    timeout=timeout,
                )
            except httpx.TimeoutException as exc:
                raise LLMTimeoutError("llm_timeout") from exc
            except httpx.ConnectError as exc:
                raise LLMUnavailableError("llm_unreachable") from exc
            except httpx.HTTPError as exc:
                raise LLMError(f"request failed: {exc}") from exc

            if resp.status_code in (401, 403):
                raise LLMAuthError(f"LLM provider rejected credentials ({resp.status_code})")
            if resp.status_code != 200:
                raise LLMError(f"LLM provider returned {resp.status_code}: {resp.text[:200]}")

            try:
                data = resp.json()
            except ValueError as exc:
                raise LLMError("LLM provider returned non-JSON body") from exc

            choices = data.get("choices") if isinstance(data, dict) else None
            if not choices:
                raise LLMError("No choices in LLM response")
            choice = choices[0] if isinstance(choices, list) else None
            if not isinstance(choice, dict):
                raise LLMError("Malformed choice in LLM response")
            message = choice.get("message") or {}
            if not isinstance(message, dict):
                raise LLMError("Malformed message in LLM response")
            content = message.get("content") or ""
            if not isinstance(content, str):
                raise LLMError(
                    f"LLM content is {type(content).__name__}, expected a string"
                )
            log.debug("LLM raw content: %d chars", len(content))
            return content
        except LLMError:
            self._failures += 1
            raise

    def debug_snapshot(self) -> dict:
        return {
            "backend": self.backend_name,
            "loaded": self._client is not None,
            "api_key_configured": bool(self._api_key),
            "calls": self._calls,
            "failures": self._failures,
        }


def _request_body(
    config: LLMConfig,
    messages: list[dict[str, str]],
    *,
    temperature: float | None,
    frequency_penalty: float | None,
    presence_penalty: float | None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": config.model,
        "messages": messages,
        "temperature": temperature if temperature is not None else config.temperature,
        "max_tokens": config.max_tokens,
        "top_p": 1,
        "frequency_penalty": (
            frequency_penalty if frequency_penalty is not None else config.frequency_penalty
        ),
        "presence_penalty": (
            presence_penalty if presence_penalty is not None else config.presence_penalty
        ),
        "response_format": {"type": "json_object"},
    }
    # Absent config fields are left out rather than sent as null.
    return {k: v for k, v in body.items() if v is not None}
