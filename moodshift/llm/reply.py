"""Reply generation: prompt assembly, model call, and reply cleanup."""

from __future__ import annotations

import json
import logging
import random
import re
from dataclasses import dataclass
from enum import Enum

from moodshift.config import settings
from moodshift.conversation import (
    LANGUAGE_NAME_TOKEN,
    ConversationMessage,
    build_messages,
)
from moodshift.llm.base import ChatBackend, LLMError
from moodshift.remote_config import FallbackBank, LLMConfig, PromptsConfig

log = logging.getLogger(__name__)


class Style(str, Enum):
    CHAOS_ENERGY = "chaosEnergy"
    GENTLE_GRANDMA = "gentleGrandma"
    PERMISSION_SLIP = "permissionSlip"
    REALITY_CHECK = "realityCheck"
    MICRO_DARE = "microDare"

    @property
    def label(self) -> str:
        """Upper-snake name used inside prompts, e.g. ``MICRO_DARE``."""
        return self.name


LANGUAGE_NAMES = {
    "en": "English",
    "hi": "Hindi",
    "es": "Spanish",
    "zh": "Chinese",
    "fr": "French",
    "de": "German",
    "ar": "Arabic",
    "ja": "Japanese",
}


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, "English")


INTENSIFY_SYSTEM_PROMPT = (
    "You are MoodShift AI in MAXIMUM POWER MODE. Amplify responses to 2× intensity. "
    "ALWAYS respond with valid JSON only."
)
INTENSIFY_TEMPERATURE = 0.9
INTENSIFY_FREQUENCY_PENALTY = 0.2
INTENSIFY_PRESENCE_PENALTY = 0.8
STYLE_TOKEN = "{style}"

DEFAULT_FALLBACK_PHRASE = "You're doing better than you think. Take a moment to breathe."

_EMOJI_RE = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\U0001F1E0-\U0001F1FF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA00-\U0001FA6F"
    "\U0001FA70-\U0001FAFF"
    "]"
)
_WHITESPACE_RE = re.compile(r"\s+")
_GREEDY_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


@dataclass(slots=True)
class GeneratedReply:
    style: Style
    text: str


# ── Cleanup ──────────────────────────────────────────────────────────


def strip_emoji(text: str) -> str:
    return _EMOJI_RE.sub("", text).strip()


def clean_reply(text: str, max_words: int | None) -> str:
    """Collapse whitespace, cap the word count, and drop emoji."""
    text = _WHITESPACE_RE.sub(" ", text.strip())
    if max_words is not None and max_words > 0:
        words = text.split(" ")
        if len(words) > max_words:
            text = " ".join(words[:max_words]) + "..."
    return strip_emoji(text)


def _first_balanced_object(content: str) -> str | None:
    start = content.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(content)):
            ch = content[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return content[start : i + 1]
        start = content.find("{", start + 1)
    return None


def _response_field(raw: str) -> str | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    value = data.get("response")
    return value if isinstance(value, str) else ""


def parse_reply_content(content: str, max_words: int | None) -> str:
    """Extract the reply text from the model's JSON output.

    Falls back to the first embedded JSON object, then to the raw content.
    """
    reply = _response_field(content)
    if reply is None:
        candidates = [_first_balanced_object(content)]
        greedy = _GREEDY_OBJECT_RE.search(content)
        if greedy:
            candidates.append(greedy.group(0))
        for candidate in candidates:
            if candidate is None:
                continue
            reply = _response_field(candidate)
            if reply is not None:
                break
    if reply is None:
        log.warning("Model output is not JSON; using raw content")
        reply = content
    return clean_reply(reply, max_words)


# ── Fallbacks ────────────────────────────────────────────────────────


_AMPLIFY_TABLE = str.maketrans({".": "! ", "!": "!! "})


def amplify_manually(text: str) -> str:
    """Deterministic stand-in for a failed intensify call.

    Both substitutions happen in one pass, so the marks a period turns into
    are never doubled again.
    """
    return text.upper().translate(_AMPLIFY_TABLE)


def pick_fallback_phrase(
    language: str,
    bank: FallbackBank,
    rng: random.Random | None = None,
) -> str:
    pool = bank.get(language) or bank.get("en") or []
    if not pool:
        return DEFAULT_FALLBACK_PHRASE
    return (rng or random).choice(pool)


# ── Generator ────────────────────────────────────────────────────────


class ReplyGenerator:
    """Produces supportive replies through a chat backend."""

    def __init__(
        self,
        backend: ChatBackend,
        *,
        default_style: Style = Style(settings.default_style),
    ) -> None:
        self._backend = backend
        self.default_style = default_style

    async def generate(
        self,
        history: list[ConversationMessage],
        user_text: str,
        prompts: PromptsConfig,
        language: str,
        llm_config: LLMConfig,
    ) -> GeneratedReply:
        if not prompts.system_prompt:
            raise LLMError("system prompt is not configured")
        messages = build_messages(
            history, user_text, prompts.system_prompt, language_name(language)
        )
        content = await self._backend.complete(messages, llm_config)
        return self._finish(content, llm_config)

    async def intensify(
        self,
        prior_reply: str,
        prompts: PromptsConfig,
        language: str,
        llm_config: LLMConfig,
        style: Style | None = None,
    ) -> GeneratedReply:
        if not prompts.stronger_prompt:
            raise LLMError("stronger prompt is not configured")
        style = style or self.default_style
        instruction = prompts.stronger_prompt.replace(STYLE_TOKEN, style.label).replace(
            LANGUAGE_NAME_TOKEN, language_name(language)
        )
        messages = [
            {"role": "system", "content": INTENSIFY_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    f'ORIGINAL RESPONSE: "{prior_reply}"\n'
                    f"ORIGINAL STYLE: {style.label}\n\n{instruction}"
                ),
            },
        ]
        content = await self._backend.complete(
            messages,
            llm_config,
            temperature=INTENSIFY_TEMPERATURE,
            frequency_penalty=INTENSIFY_FREQUENCY_PENALTY,
            presence_penalty=INTENSIFY_PRESENCE_PENALTY,
        )
        return self._finish(content, llm_config, style)

    def _finish(
        self, content: str, llm_config: LLMConfig, style: Style | None = None
    ) -> GeneratedReply:
        text = parse_reply_content(content, llm_config.max_response_words)
        if not text:
            raise LLMError("Model returned an empty reply")
        return GeneratedReply(style=style or self.default_style, text=text)
