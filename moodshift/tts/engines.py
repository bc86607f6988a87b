"""Engine tiers, per-mode engine choice, and voice lookup."""

from __future__ import annotations

from enum import Enum

from moodshift.remote_config import PollyConfig, VoiceTable


class VoiceEngine(str, Enum):
    GENERATIVE = "generative"
    NEURAL = "neural"
    STANDARD = "standard"


DEFAULT_VOICES = {"male": "Matthew", "female": "Joanna"}


def engine_order(preferred: str | None) -> list[str]:
    """Tiers to try, best first, starting at ``preferred``."""
    if preferred == VoiceEngine.GENERATIVE.value:
        return [
            VoiceEngine.GENERATIVE.value,
            VoiceEngine.NEURAL.value,
            VoiceEngine.STANDARD.value,
        ]
    if preferred == VoiceEngine.NEURAL.value:
        return [VoiceEngine.NEURAL.value, VoiceEngine.STANDARD.value]
    return [VoiceEngine.STANDARD.value]


def feature_engine(config: PollyConfig, *, intensify: bool, soft_voice: bool) -> str:
    """Resolve the engine for a request mode; intensify wins over soft voice."""
    features = config.feature_engines
    if intensify:
        chosen = features.stronger
    elif soft_voice:
        chosen = features.crystal
    else:
        chosen = features.main
    return chosen or config.engine or VoiceEngine.STANDARD.value


def _opposite(gender: str) -> str:
    return "female" if gender == "male" else "male"


def select_voice(
    locale: str,
    gender: str,
    preferred_engine: str | None,
    voices: VoiceTable,
) -> str:
    """Pick a voice id for the locale, preferring the requested gender."""
    default = DEFAULT_VOICES.get(gender, DEFAULT_VOICES["female"])
    locale_voices = voices.get(locale)
    if not locale_voices:
        return default

    order = engine_order(preferred_engine)
    for wanted in (gender, _opposite(gender)):
        for engine in order:
            voice = (locale_voices.get(engine) or {}).get(wanted)
            if voice:
                return voice
    return default
