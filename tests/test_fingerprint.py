"""Cache fingerprint tests."""

from __future__ import annotations

import hashlib

from moodshift.cache import derive_fingerprint

BASE = dict(
    text="I feel stuck",
    language="en",
    locale="en-US",
    voice_gender="female",
    soft_voice=False,
    intensify=False,
)


def test_fingerprint_is_32_lowercase_hex():
    fp = derive_fingerprint(**BASE)
    assert len(fp) == 32
    assert fp == fp.lower()
    int(fp, 16)


def test_fingerprint_matches_documented_key_material():
    expected = hashlib.sha256(b"I feel stuck|en|en-US|female|false").hexdigest()[:32]
    assert derive_fingerprint(**BASE) == expected


def test_fingerprint_is_deterministic():
    assert derive_fingerprint(**BASE) == derive_fingerprint(**dict(BASE))


def test_fingerprint_changes_with_each_input():
    base = derive_fingerprint(**BASE)
    variants = [
        {"text": "I feel great"},
        {"language": "es"},
        {"locale": "en-GB"},
        {"voice_gender": "male"},
        {"soft_voice": True},
        {"intensify": True},
    ]
    digests = {base}
    for change in variants:
        fp = derive_fingerprint(**{**BASE, **change})
        assert fp != base, change
        digests.add(fp)
    assert len(digests) == len(variants) + 1


def test_intensify_keys_on_prior_reply_not_user_text():
    a = derive_fingerprint(
        **{**BASE, "intensify": True, "text": "one"}, prior_reply="You can do it."
    )
    b = derive_fingerprint(
        **{**BASE, "intensify": True, "text": "two"}, prior_reply="You can do it."
    )
    c = derive_fingerprint(
        **{**BASE, "intensify": True, "text": "one"}, prior_reply="Different reply."
    )
    assert a == b
    assert a != c


def test_intensify_key_material():
    expected = hashlib.sha256(b"stronger|Go on.|en-US|male|true").hexdigest()[:32]
    fp = derive_fingerprint(
        None, "en", "en-US", "male", True, True, prior_reply="Go on."
    )
    assert fp == expected
