"""Reply parsing, cleanup and fallback tests."""

from __future__ import annotations

import asyncio
import json
import random

import httpx
import pytest

from moodshift.conversation import ConversationMessage
from moodshift.llm import (
    ChatCompletionBackend,
    LLMError,
    ReplyGenerator,
    Style,
    amplify_manually,
    language_name,
    pick_fallback_phrase,
)
from moodshift.llm.reply import (
    DEFAULT_FALLBACK_PHRASE,
    INTENSIFY_SYSTEM_PROMPT,
    clean_reply,
    parse_reply_content,
)
from moodshift.remote_config import LLMConfig, PromptsConfig
from moodshift.remote_config_defaults import default_document


def chat_response(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def _llm_config(**overrides) -> LLMConfig:
    doc = default_document("llm")
    doc.update(overrides)
    return LLMConfig.from_document(doc)


def _prompts() -> PromptsConfig:
    return PromptsConfig(
        system_prompt="Coach in $languageName.",
        stronger_prompt='Amplify as {style} in $languageName. {"style": "{style}"}',
    )


# ── Parsing ──────────────────────────────────────────────────────────


def test_parse_plain_json():
    assert parse_reply_content('{"response": "You got this."}', 300) == "You got this."


def test_parse_salvages_embedded_object():
    content = 'Sure! Here you go: {"response": "Deep  breath,\\n friend."} Hope it helps'
    assert parse_reply_content(content, 300) == "Deep breath, friend."


def test_parse_salvages_first_balanced_object_before_trailing_braces():
    content = 'noise {"response": "first"} more {not json}'
    assert parse_reply_content(content, 300) == "first"


def test_parse_falls_back_to_raw_text_without_emoji():
    assert parse_reply_content("Just text \U0001F600 here", 300) == "Just text here"


def test_parse_missing_response_field_yields_empty():
    assert parse_reply_content('{"style": "x"}', 300) == ""


def test_clean_reply_truncates_with_ellipsis():
    text = " ".join(f"w{i}" for i in range(10))
    assert clean_reply(text, 4) == "w0 w1 w2 w3..."


def test_clean_reply_keeps_text_at_limit():
    assert clean_reply("a b c", 3) == "a b c"


def test_clean_reply_strips_emoji_ranges():
    text = "Shine ☀ on \U0001F680 now \U0001F92F \U0001FA77 ok ❤"
    assert clean_reply(text, 300) == "Shine  on  now   ok"


def test_clean_reply_collapses_whitespace():
    assert clean_reply("  a \n\t b  ", 300) == "a b"


def test_clean_reply_without_word_cap():
    text = " ".join(["x"] * 500)
    assert clean_reply(text, None) == text


# ── Fallbacks ────────────────────────────────────────────────────────


def test_amplify_manually_substitutes_each_mark_once():
    out = amplify_manually("Good. You did it!")
    assert out == "GOOD!  YOU DID IT!! "
    assert " ".join(out.split()) == "GOOD! YOU DID IT!!"
    assert "!!!" not in out
    assert not out.startswith("GOOD!!")


def test_amplify_manually_period_becomes_single_bang():
    assert amplify_manually("a.b") == "A! B"
    assert amplify_manually("you can. go!") == "YOU CAN!  GO!! "


def test_fallback_uses_language_pool():
    bank = {"en": ["english"], "es": ["uno", "dos"]}
    assert pick_fallback_phrase("es", bank, random.Random(1)) in {"uno", "dos"}


def test_fallback_uses_english_pool_for_unknown_language():
    assert pick_fallback_phrase("xx", {"en": ["only english"]}) == "only english"


def test_fallback_empty_pool_uses_hardcoded_sentence():
    assert pick_fallback_phrase("xx", {"en": []}) == DEFAULT_FALLBACK_PHRASE
    assert pick_fallback_phrase("xx", {}) == DEFAULT_FALLBACK_PHRASE


def test_language_names():
    assert language_name("hi") == "Hindi"
    assert language_name("ja") == "Japanese"
    assert language_name("pt") == "English"


def test_style_labels():
    assert Style.MICRO_DARE.value == "microDare"
    assert Style.MICRO_DARE.label == "MICRO_DARE"
    assert Style("gentleGrandma").label == "GENTLE_GRANDMA"


# ── Generator over a mocked provider ─────────────────────────────────


def test_generate_sends_history_and_parses_reply():
    async def _run() -> None:
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return chat_response('{"response": "  Nice   work. "}')

        backend = ChatCompletionBackend("k", transport=httpx.MockTransport(handler))
        gen = ReplyGenerator(backend, default_style=Style.MICRO_DARE)
        history = [
            ConversationMessage("user", "old", "t"),
            ConversationMessage("assistant", "older reply", "t"),
            ConversationMessage("user", "recent", "t"),
            ConversationMessage("assistant", "recent reply", "t"),
        ]
        try:
            reply = await gen.generate(history, "today", _prompts(), "de", _llm_config())
        finally:
            await backend.close()

        assert reply.text == "Nice work."
        assert reply.style is Style.MICRO_DARE
        messages = captured[0]["messages"]
        assert messages[0] == {"role": "system", "content": "Coach in German."}
        assert [m["content"] for m in messages[1:]] == ["old", "older reply", "today"]

    asyncio.run(_run())


@pytest.mark.asyncio
async def test_intensify_builds_fixed_instruction_and_overrides_sampling():
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return chat_response('{"style": "MICRO_DARE", "response": "YOU ARE UNSTOPPABLE!!"}')

    backend = ChatCompletionBackend("k", transport=httpx.MockTransport(handler))
    gen = ReplyGenerator(backend)
    try:
        reply = await gen.intensify("You can.", _prompts(), "es", _llm_config())
    finally:
        await backend.close()

    assert reply.text == "YOU ARE UNSTOPPABLE!!"
    body = captured[0]
    assert body["temperature"] == 0.9
    assert body["frequency_penalty"] == 0.2
    assert body["presence_penalty"] == 0.8
    assert body["messages"][0] == {"role": "system", "content": INTENSIFY_SYSTEM_PROMPT}
    user = body["messages"][1]["content"]
    assert user.startswith('ORIGINAL RESPONSE: "You can."\nORIGINAL STYLE: MICRO_DARE\n\n')
    assert "Amplify as MICRO_DARE in Spanish." in user
    assert '"style": "MICRO_DARE"' in user


@pytest.mark.asyncio
async def test_empty_reply_is_a_generation_failure():
    def handler(_request: httpx.Request) -> httpx.Response:
        return chat_response('{"response": "   "}')

    backend = ChatCompletionBackend("k", transport=httpx.MockTransport(handler))
    gen = ReplyGenerator(backend)
    try:
        with pytest.raises(LLMError, match="empty"):
            await gen.generate([], "hi", _prompts(), "en", _llm_config())
    finally:
        await backend.close()


@pytest.mark.asyncio
async def test_missing_prompt_is_a_generation_failure():
    backend = ChatCompletionBackend(
        "k", transport=httpx.MockTransport(lambda _r: chat_response("{}"))
    )
    gen = ReplyGenerator(backend)
    with pytest.raises(LLMError, match="system prompt"):
        await gen.generate([], "hi", PromptsConfig(), "en", _llm_config())
    await backend.close()


@pytest.mark.asyncio
async def test_reply_word_cap_comes_from_config():
    def handler(_request: httpx.Request) -> httpx.Response:
        return chat_response(json.dumps({"response": "one two three four five"}))

    backend = ChatCompletionBackend("k", transport=httpx.MockTransport(handler))
    gen = ReplyGenerator(backend)
    try:
        reply = await gen.generate([], "hi", _prompts(), "en", _llm_config(maxResponseWords=2))
    finally:
        await backend.close()
    assert reply.text == "one two..."
