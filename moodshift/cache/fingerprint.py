"""Content fingerprints for cached audio artifacts."""

from __future__ import annotations

import hashlib

FINGERPRINT_LENGTH = 32


def derive_fingerprint(
    text: str | None,
    language: str,
    locale: str,
    voice_gender: str,
    soft_voice: bool,
    intensify: bool,
    prior_reply: str | None = None,
) -> str:
    """Return a 32-char hex key for one request's audio.

    An intensify request keys on the prior reply, not on the user text, so
    every device asking to intensify the same reply shares one artifact.
    Device identity never enters the key.
    """
    soft = "true" if soft_voice else "false"
    if intensify:
        material = f"stronger|{prior_reply or text or ''}|{locale}|{voice_gender}|{soft}"
    else:
        material = f"{text or ''}|{language}|{locale}|{voice_gender}|{soft}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]
