"""Configuration validation tests."""

from __future__ import annotations

import pytest

from moodshift.config import Settings


def test_settings_defaults_are_valid() -> None:
    s = Settings()
    assert s.conversation_max_messages % 2 == 0
    assert s.config_ttl_s >= 0
    assert "{region}" in s.polly_endpoint_template


def test_settings_reject_odd_conversation_cap() -> None:
    with pytest.raises(ValueError, match="CONVERSATION_MAX_MESSAGES"):
        Settings(conversation_max_messages=7)


def test_settings_reject_unknown_log_level() -> None:
    with pytest.raises(ValueError, match="LOG_LEVEL must be one of"):
        Settings(log_level="CHATTY")


def test_settings_reject_unknown_default_style() -> None:
    with pytest.raises(ValueError, match="DEFAULT_STYLE must be one of"):
        Settings(default_style="shouty")


def test_settings_reject_endpoint_without_region_placeholder() -> None:
    with pytest.raises(ValueError, match="POLLY_ENDPOINT_TEMPLATE"):
        Settings(polly_endpoint_template="https://polly.example.com/v1/speech")


def test_settings_reject_empty_cache_prefix() -> None:
    with pytest.raises(ValueError, match="CACHE_PREFIX"):
        Settings(cache_prefix="")
