"""Conversation store and message assembly tests."""

from __future__ import annotations

import pytest

from moodshift.conversation import (
    CONVERSATIONS_COLLECTION,
    ConversationMessage,
    ConversationStore,
    build_messages,
)
from moodshift.storage import StorageError


@pytest.mark.asyncio
async def test_read_unknown_device_is_empty(documents):
    store = ConversationStore(documents, max_messages=8)
    assert await store.read("nobody") == []


@pytest.mark.asyncio
async def test_append_stores_pair_with_shared_timestamp(documents):
    store = ConversationStore(documents, max_messages=8)
    await store.append("dev-1", "hello", "hi there")

    history = await store.read("dev-1")
    assert [(m.role, m.content) for m in history] == [
        ("user", "hello"),
        ("assistant", "hi there"),
    ]
    assert history[0].timestamp == history[1].timestamp

    doc = await documents.get(CONVERSATIONS_COLLECTION, "dev-1")
    assert doc["deviceId"] == "dev-1"
    assert doc["lastActivity"] == history[0].timestamp


@pytest.mark.asyncio
async def test_append_evicts_oldest_pairs_first(documents):
    store = ConversationStore(documents, max_messages=8)
    for i in range(6):
        await store.append("dev-1", f"u{i}", f"a{i}")

    history = await store.read("dev-1")
    assert len(history) == 8
    assert [m.content for m in history] == [
        "u2", "a2", "u3", "a3", "u4", "a4", "u5", "a5",
    ]


@pytest.mark.asyncio
async def test_devices_do_not_share_history(documents):
    store = ConversationStore(documents, max_messages=8)
    await store.append("a", "1", "2")
    await store.append("b", "3", "4")
    assert [m.content for m in await store.read("a")] == ["1", "2"]


@pytest.mark.asyncio
async def test_clear_removes_history(documents):
    store = ConversationStore(documents, max_messages=8)
    await store.append("dev-1", "hello", "hi")
    assert await store.clear("dev-1") is True
    assert await store.read("dev-1") == []
    assert await store.clear("dev-1") is False


@pytest.mark.asyncio
async def test_storage_errors_are_swallowed(documents, monkeypatch):
    store = ConversationStore(documents, max_messages=8)

    async def broken(*_args, **_kwargs):
        raise StorageError("offline")

    monkeypatch.setattr(documents, "get", broken)
    monkeypatch.setattr(documents, "update", broken)
    monkeypatch.setattr(documents, "delete", broken)

    assert await store.read("dev-1") == []
    await store.append("dev-1", "u", "a")
    assert await store.clear("dev-1") is False


def test_odd_cap_is_rejected(documents):
    with pytest.raises(ValueError):
        ConversationStore(documents, max_messages=5)


def _msg(role: str, content: str) -> ConversationMessage:
    return ConversationMessage(role=role, content=content, timestamp="t")


def test_build_messages_skips_most_recent_pair():
    history = [
        _msg("user", "u1"),
        _msg("assistant", "a1"),
        _msg("user", "u2"),
        _msg("assistant", "a2"),
    ]
    messages = build_messages(history, "now", "Speak $languageName.", "Hindi")

    assert messages[0] == {"role": "system", "content": "Speak Hindi."}
    assert messages[1:] == [
        {"role": "user", "content": "u1"},
        {"role": "assistant", "content": "a1"},
        {"role": "user", "content": "now"},
    ]


def test_build_messages_replaces_every_language_token():
    messages = build_messages([], "hi", "$languageName and $languageName", "French")
    assert messages[0]["content"] == "French and French"
    assert messages[-1] == {"role": "user", "content": "hi"}
    assert len(messages) == 2


def test_build_messages_with_single_pair_history_sends_no_history():
    history = [_msg("user", "u1"), _msg("assistant", "a1")]
    messages = build_messages(history, "next", "sys", "English")
    assert [m["role"] for m in messages] == ["system", "user"]
