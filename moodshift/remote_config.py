"""Runtime configuration documents with a short in-process cache.

Six config classes are read from the ``config`` collection of the document
store. Each entry is cached per provider instance for ``ttl_s`` seconds; a
missing or unreadable document is replaced by its committed default, which
is cached as well so a persistent outage costs one fetch per window.

A present document is taken as complete: fields it lacks come through as
``None`` instead of being filled from the default document. The only
exception is ``featureEngines`` on the polly document, which is derived from
``engine`` when absent.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from moodshift.config import settings
from moodshift.remote_config_defaults import default_document
from moodshift.storage import DocumentStore, StorageError

log = logging.getLogger(__name__)

CONFIG_COLLECTION = "config"

T = TypeVar("T")

VoiceTable = dict[str, dict[str, dict[str, str]]]
FallbackBank = dict[str, list[str]]


def _num(doc: dict[str, Any], key: str) -> float | None:
    value = doc.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _str(doc: dict[str, Any], key: str) -> str | None:
    value = doc.get(key)
    return value if isinstance(value, str) else None


@dataclass(slots=True)
class LLMConfig:
    model: str | None = None
    api_url: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    timeout_seconds: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    max_response_words: int | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> LLMConfig:
        max_tokens = _num(doc, "maxTokens")
        max_words = _num(doc, "maxResponseWords")
        return cls(
            model=_str(doc, "model"),
            api_url=_str(doc, "apiUrl"),
            temperature=_num(doc, "temperature"),
            max_tokens=int(max_tokens) if max_tokens is not None else None,
            timeout_seconds=_num(doc, "timeoutSeconds"),
            frequency_penalty=_num(doc, "frequencyPenalty"),
            presence_penalty=_num(doc, "presencePenalty"),
            max_response_words=int(max_words) if max_words is not None else None,
        )


@dataclass(slots=True)
class PromptsConfig:
    system_prompt: str | None = None
    stronger_prompt: str | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> PromptsConfig:
        return cls(
            system_prompt=_str(doc, "systemPrompt"),
            stronger_prompt=_str(doc, "strongerPrompt"),
        )


@dataclass(slots=True)
class FeatureEngines:
    main: str | None = None
    stronger: str | None = None
    crystal: str | None = None


@dataclass(slots=True)
class PollyConfig:
    region: str | None = None
    engine: str | None = None
    feature_engines: FeatureEngines = field(default_factory=FeatureEngines)
    output_format: str | None = None
    timeout_seconds: float | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> PollyConfig:
        engine = _str(doc, "engine")
        raw_features = doc.get("featureEngines")
        if isinstance(raw_features, dict):
            features = FeatureEngines(
                main=_str(raw_features, "main"),
                stronger=_str(raw_features, "stronger"),
                crystal=_str(raw_features, "crystal"),
            )
        else:
            features = FeatureEngines(main=engine, stronger=engine, crystal=engine)
        return cls(
            region=_str(doc, "region"),
            engine=engine,
            feature_engines=features,
            output_format=_str(doc, "outputFormat"),
            timeout_seconds=_num(doc, "timeoutSeconds"),
        )


@dataclass(slots=True)
class ProsodySetting:
    rate: str | None = None
    pitch: str | None = None
    volume: str | None = None


ProsodyTable = dict[str, ProsodySetting]


def parse_voice_table(doc: dict[str, Any]) -> VoiceTable:
    table: VoiceTable = {}
    for locale, tiers in doc.items():
        if not isinstance(tiers, dict):
            continue
        table[locale] = {
            tier: {g: v for g, v in voices.items() if isinstance(v, str) and v}
            for tier, voices in tiers.items()
            if isinstance(voices, dict)
        }
    return table


def parse_prosody_table(doc: dict[str, Any]) -> ProsodyTable:
    return {
        style: ProsodySetting(
            rate=_str(entry, "rate"),
            pitch=_str(entry, "pitch"),
            volume=_str(entry, "volume"),
        )
        for style, entry in doc.items()
        if isinstance(entry, dict)
    }


def parse_fallback_bank(doc: dict[str, Any]) -> FallbackBank:
    return {
        lang: [p for p in phrases if isinstance(p, str) and p.strip()]
        for lang, phrases in doc.items()
        if isinstance(phrases, list)
    }


@dataclass(slots=True)
class ConfigBundle:
    llm: LLMConfig
    prompts: PromptsConfig
    polly: PollyConfig
    voices: VoiceTable
    prosody: ProsodyTable
    fallbacks: FallbackBank


@dataclass(slots=True)
class _CacheEntry:
    value: Any
    loaded_at: float
    from_default: bool


class ConfigProvider:
    """Serves the six config classes with per-instance TTL caching."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        ttl_s: float = settings.config_ttl_s,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._ttl_s = ttl_s
        self._clock = clock
        self._cache: dict[str, _CacheEntry] = {}

    async def get_llm(self) -> LLMConfig:
        return await self._get("llm", LLMConfig.from_document)

    async def get_prompts(self) -> PromptsConfig:
        return await self._get("prompts", PromptsConfig.from_document)

    async def get_polly(self) -> PollyConfig:
        return await self._get("polly", PollyConfig.from_document)

    async def get_voices(self) -> VoiceTable:
        return await self._get("voices", parse_voice_table)

    async def get_prosody(self) -> ProsodyTable:
        return await self._get("prosody", parse_prosody_table)

    async def get_fallbacks(self) -> FallbackBank:
        return await self._get("fallbacks", parse_fallback_bank)

    async def load_all(self) -> ConfigBundle:
        """Fetch all six classes concurrently."""
        llm, prompts, polly, voices, prosody, fallbacks = await asyncio.gather(
            self.get_llm(),
            self.get_prompts(),
            self.get_polly(),
            self.get_voices(),
            self.get_prosody(),
            self.get_fallbacks(),
        )
        return ConfigBundle(
            llm=llm,
            prompts=prompts,
            polly=polly,
            voices=voices,
            prosody=prosody,
            fallbacks=fallbacks,
        )

    def invalidate(self) -> None:
        self._cache.clear()

    def debug_snapshot(self) -> dict:
        now = self._clock()
        return {
            "ttl_s": self._ttl_s,
            "entries": {
                name: {
                    "age_s": round(now - entry.loaded_at, 3),
                    "default": entry.from_default,
                }
                for name, entry in self._cache.items()
            },
        }

    async def _get(self, name: str, parse: Callable[[dict[str, Any]], T]) -> T:
        entry = self._cache.get(name)
        if entry is not None and self._clock() - entry.loaded_at < self._ttl_s:
            return entry.value

        doc = await self._fetch(name)
        from_default = doc is None
        value = parse(default_document(name) if doc is None else doc)
        self._cache[name] = _CacheEntry(
            value=value, loaded_at=self._clock(), from_default=from_default
        )
        return value

    async def _fetch(self, name: str) -> dict[str, Any] | None:
        try:
            doc = await self._store.get(CONFIG_COLLECTION, name)
        except StorageError:
            log.exception("Error fetching config %s, using defaults", name)
            return None
        if doc is None:
            log.warning("Config document %s not found, using defaults", name)
            return None
        log.debug("Config loaded: %s", name)
        return doc
