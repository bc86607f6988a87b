"""Amazon Polly synthesizer over plain HTTPS with hand-rolled SigV4."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable

import httpx

from moodshift.config import settings
from moodshift.remote_config import PollyConfig, VoiceTable
from moodshift.tts.base import (
    SynthesisAuthError,
    SynthesisError,
    SynthesisResult,
    SynthesisTimeoutError,
    Synthesizer,
)
from moodshift.tts.engines import engine_order, select_voice
from moodshift.tts.signing import sign_request

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 10.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PollySynthesizer(Synthesizer):
    """Calls ``/v1/speech`` once per engine tier until one returns audio.

    The voice is picked once for the preferred engine and kept for every
    fallback tier.
    """

    def __init__(
        self,
        access_key: str = settings.aws_access_key,
        secret_key: str = settings.aws_secret_key,
        *,
        endpoint_template: str = settings.polly_endpoint_template,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._access_key = access_key
        self._secret_key = secret_key
        self._endpoint_template = endpoint_template
        self._transport = transport
        self._clock = clock
        self._client: httpx.AsyncClient | None = None
        self._engine_failures: dict[str, int] = {}

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

    async def synthesize(
        self,
        markup: str,
        locale: str,
        gender: str,
        preferred_engine: str,
        config: PollyConfig,
        voices: VoiceTable,
    ) -> SynthesisResult:
        if not self._access_key or not self._secret_key:
            raise SynthesisAuthError("speech provider credentials are not configured")
        if not config.region:
            raise SynthesisError("polly config is missing region")

        order = engine_order(preferred_engine)
        voice_id = select_voice(locale, gender, preferred_engine, voices)
        for index, engine in enumerate(order):
            try:
                audio = await self._call(markup, voice_id, locale, engine, config)
            except SynthesisError as exc:
                self._engine_failures[engine] = self._engine_failures.get(engine, 0) + 1
                if index == len(order) - 1:
                    log.error("Polly engine %s failed, no tiers left: %s", engine, exc)
                    raise
                log.warning("Polly engine %s failed, trying next: %s", engine, exc)
                continue
            log.info(
                "Synthesized %d bytes with voice=%s engine=%s", len(audio), voice_id, engine
            )
            return SynthesisResult(audio=audio, voice_id=voice_id, engine=engine)
        raise SynthesisError("no engine tiers to try")

    async def _call(
        self,
        markup: str,
        voice_id: str,
        locale: str,
        engine: str,
        config: PollyConfig,
    ) -> bytes:
        await self.start()
        assert self._client is not None

        url = self._endpoint_template.format(region=config.region)
        payload = {
            "Text": markup,
            "TextType": "ssml",
            "VoiceId": voice_id,
            "LanguageCode": locale,
            "Engine": engine,
            "OutputFormat": config.output_format,
        }
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = sign_request(
            "POST",
            url,
            body,
            self._clock(),
            config.region,
            self._access_key,
            self._secret_key,
        )
        timeout = (
            httpx.Timeout(config.timeout_seconds, connect=5.0)
            if config.timeout_seconds
            else httpx.USE_CLIENT_DEFAULT
        )

        try:
            resp = await self._client.post(url, content=body, headers=headers, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise SynthesisTimeoutError("polly_timeout", engine=engine) from exc
        except httpx.HTTPError as exc:
            raise SynthesisError(f"polly request failed: {exc}", engine=engine) from exc

        if resp.status_code in (401, 403):
            raise SynthesisAuthError(
                f"Polly API error: {resp.status_code} - {resp.text[:200]}",
                engine=engine,
                status_code=resp.status_code,
            )
        if resp.status_code != 200:
            raise SynthesisError(
                f"Polly API error: {resp.status_code} - {resp.text[:200]}",
                engine=engine,
                status_code=resp.status_code,
            )
        if not resp.content:
            raise SynthesisError("Polly returned empty audio", engine=engine)
        return resp.content

    def debug_snapshot(self) -> dict:
        return {
            "backend": "polly",
            "loaded": self._client is not None,
            "credentials_configured": bool(self._access_key and self._secret_key),
            "engine_failures": dict(self._engine_failures),
        }
