"""SSML builders for the three reply modes.

Each engine tier accepts a different subset of SSML, so every mode carries
its own template per tier:

- generative: ``<prosody>`` rate and volume only, extremal keywords only
- neural: ``<prosody volume>`` in decibels only
- standard: full prosody plus ``<emphasis>`` and ``<amazon:effect>`` tags
"""

from __future__ import annotations

import re

from moodshift.remote_config import ProsodySetting, ProsodyTable
from moodshift.tts.engines import VoiceEngine

_MAX_ARTIFACT_PASSES = 10

_ARTIFACT_PATTERNS = [
    re.compile(r"^[\s,;]*(?:pitch|rate|volume|voice|prosody)\s*[=:]\s*\S+", re.I),
    re.compile(
        r"^[\s,;]*(?:pitch|rate|volume|voice|prosody)\s+"
        r"(?:equal|equals|is|to|at|set to|set at)\s+\S+",
        re.I,
    ),
    re.compile(
        r"^[\s,;]*(?:x-)?(?:high|low|medium|soft|loud|slow|fast|normal|default)\s+"
        r"(?:pitch|rate|volume|voice)",
        re.I,
    ),
    re.compile(r"^\s*(?:(?:pitch|rate|volume)\s*[=:]\s*\S+[\s,;]*)+", re.I),
]
_LEADING_PUNCT_RE = re.compile(r"^[\s,;:.]+")
_WHITESPACE_RE = re.compile(r"\s+")

_GENERATIVE_RATE = {
    "x-slow": "x-slow",
    "slow": "x-slow",
    "medium": "medium",
    "fast": "x-fast",
    "x-fast": "x-fast",
}
_GENERATIVE_VOLUME = {
    "silent": "silent",
    "x-soft": "x-soft",
    "soft": "x-soft",
    "medium": "medium",
    "loud": "x-loud",
    "x-loud": "x-loud",
}
_NEURAL_VOLUME_DB = {
    "silent": "-20dB",
    "x-soft": "-10dB",
    "soft": "-6dB",
    "medium": "+0dB",
    "loud": "+6dB",
    "x-loud": "+10dB",
}

_MEDIUM = ProsodySetting(rate="medium", pitch="medium", volume="medium")


def strip_prosody_artifacts(text: str) -> str:
    """Drop leading directive-like fragments the model sometimes echoes."""
    for _ in range(_MAX_ARTIFACT_PASSES):
        for pattern in _ARTIFACT_PATTERNS:
            match = pattern.match(text)
            if match:
                text = text[match.end() :].strip()
                break
        else:
            break
    return _LEADING_PUNCT_RE.sub("", text).strip()


def escape_xml(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def prepare_text(text: str) -> str:
    text = _WHITESPACE_RE.sub(" ", text.strip())
    return escape_xml(strip_prosody_artifacts(text))


def build_normal(
    text: str,
    engine: str,
    style: str,
    prosody: ProsodyTable,
) -> str:
    body = prepare_text(text)
    setting = prosody.get(style) or _MEDIUM

    if engine == VoiceEngine.GENERATIVE.value:
        rate = _GENERATIVE_RATE.get(setting.rate or "", "medium")
        volume = _GENERATIVE_VOLUME.get(setting.volume or "", "medium")
        return f'<speak><prosody rate="{rate}" volume="{volume}">{body}</prosody></speak>'
    if engine == VoiceEngine.NEURAL.value:
        volume_db = _NEURAL_VOLUME_DB.get(setting.volume or "", "+0dB")
        return f'<speak><prosody volume="{volume_db}">{body}</prosody></speak>'
    rate = setting.rate or "medium"
    volume = setting.volume or "medium"
    pitch = setting.pitch or "medium"
    attrs = f'rate="{rate}" volume="{volume}" pitch="{pitch}"'
    return f"<speak><prosody {attrs}>{body}</prosody></speak>"


def build_intensified(text: str, engine: str) -> str:
    body = prepare_text(text)
    if engine == VoiceEngine.GENERATIVE.value:
        return f'<speak><prosody rate="medium" volume="x-loud">{body}</prosody></speak>'
    if engine == VoiceEngine.NEURAL.value:
        return f'<speak><prosody volume="+6dB">{body}</prosody></speak>'
    return (
        '<speak><emphasis level="strong">'
        f'<prosody rate="medium" volume="+6dB" pitch="+15%">{body}</prosody>'
        "</emphasis></speak>"
    )


def build_soft(text: str, engine: str) -> str:
    body = prepare_text(text)
    if engine == VoiceEngine.GENERATIVE.value:
        return f'<speak><prosody rate="x-slow" volume="x-soft">{body}</prosody></speak>'
    if engine == VoiceEngine.NEURAL.value:
        return (
            '<speak><amazon:effect name="drc">'
            f'<prosody volume="+0dB">{body}</prosody>'
            "</amazon:effect></speak>"
        )
    return (
        '<speak><amazon:effect name="drc"><amazon:effect phonation="soft">'
        '<amazon:effect vocal-tract-length="+12%">'
        f'<prosody rate="slow" pitch="-10%" volume="soft">{body}</prosody>'
        "</amazon:effect></amazon:effect></amazon:effect></speak>"
    )


def build_for_mode(
    text: str,
    engine: str,
    *,
    intensify: bool,
    soft_voice: bool,
    style: str,
    prosody: ProsodyTable,
) -> str:
    if intensify:
        return build_intensified(text, engine)
    if soft_voice:
        return build_soft(text, engine)
    return build_normal(text, engine, style, prosody)
