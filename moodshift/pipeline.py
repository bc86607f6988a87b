"""Request orchestration: cache, generation, synthesis, persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from moodshift.cache import ArtifactCache, derive_fingerprint
from moodshift.conversation import ConversationStore
from moodshift.llm import LLMError, ReplyGenerator, amplify_manually, pick_fallback_phrase
from moodshift.remote_config import ConfigProvider
from moodshift.schemas import ProcessRequest
from moodshift.storage import StorageError
from moodshift.tts.base import SynthesisError, Synthesizer
from moodshift.tts.engines import feature_engine
from moodshift.tts.markup import build_for_mode

log = logging.getLogger(__name__)


class RequestValidationError(ValueError):
    """Raised for incomplete requests before any side effect."""


class AudioSynthesisFailed(RuntimeError):
    """Audio could not be produced or stored; ``response`` still holds the text."""

    def __init__(self, response: str, cause: Exception) -> None:
        super().__init__(f"audio synthesis failed: {cause}")
        self.response = response
        self.cause = cause


@dataclass(slots=True)
class ProcessOutcome:
    response: str
    audio_url: str
    voice_id: str
    engine: str
    cached: bool = False


class ResponsePipeline:
    """Runs one request from fingerprint to stored audio."""

    def __init__(
        self,
        cache: ArtifactCache,
        config: ConfigProvider,
        conversations: ConversationStore,
        replies: ReplyGenerator,
        synthesizer: Synthesizer,
    ) -> None:
        self._cache = cache
        self._config = config
        self._conversations = conversations
        self._replies = replies
        self._synthesizer = synthesizer

    async def process(self, req: ProcessRequest) -> ProcessOutcome:
        if not req.is_complete():
            raise RequestValidationError("Missing required fields")

        intensify = req.stronger_mode
        fingerprint = derive_fingerprint(
            req.text,
            req.language,
            req.locale,
            req.voice_gender,
            req.crystal_voice,
            intensify,
            req.original_response,
        )
        log.info(
            "Processing device=%s mode=%s soft=%s fp=%s",
            req.device_id,
            "stronger" if intensify else "normal",
            req.crystal_voice,
            fingerprint,
        )

        hit = await self._cache.lookup(fingerprint)
        if hit is not None:
            return ProcessOutcome(
                response=hit.response,
                audio_url=hit.audio_url,
                voice_id=hit.voice_id,
                engine=hit.engine,
                cached=True,
            )

        bundle = await self._config.load_all()

        if intensify:
            prior = req.original_response or ""
            try:
                reply = await self._replies.intensify(
                    prior, bundle.prompts, req.language, bundle.llm
                )
                text, style = reply.text, reply.style
            except LLMError as exc:
                log.warning("Intensify failed, amplifying locally: %s", exc)
                text, style = amplify_manually(prior), self._replies.default_style
        else:
            user_text = req.text or ""
            history = await self._conversations.read(req.device_id)
            try:
                reply = await self._replies.generate(
                    history, user_text, bundle.prompts, req.language, bundle.llm
                )
            except LLMError as exc:
                log.warning("Reply generation failed, using fallback phrase: %s", exc)
                text = pick_fallback_phrase(req.language, bundle.fallbacks)
                style = self._replies.default_style
            else:
                text, style = reply.text, reply.style
                await self._conversations.append(req.device_id, user_text, text)

        engine = feature_engine(
            bundle.polly, intensify=intensify, soft_voice=req.crystal_voice
        )
        markup = build_for_mode(
            text,
            engine,
            intensify=intensify,
            soft_voice=req.crystal_voice,
            style=style.value,
            prosody=bundle.prosody,
        )

        try:
            result = await self._synthesizer.synthesize(
                markup,
                req.locale,
                req.voice_gender,
                engine,
                bundle.polly,
                bundle.voices,
            )
            audio_url = await self._cache.store(
                fingerprint,
                text,
                result.audio,
                result.voice_id,
                result.engine,
                output_format=bundle.polly.output_format,
            )
        except (SynthesisError, StorageError) as exc:
            log.error("Audio production failed for fp=%s: %s", fingerprint, exc)
            raise AudioSynthesisFailed(text, exc) from exc

        return ProcessOutcome(
            response=text,
            audio_url=audio_url,
            voice_id=result.voice_id,
            engine=result.engine,
        )
