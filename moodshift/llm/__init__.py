"""LLM package exports."""

from moodshift.llm.base import (
    ChatBackend,
    LLMAuthError,
    LLMError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from moodshift.llm.chat_backend import ChatCompletionBackend
from moodshift.llm.reply import (
    GeneratedReply,
    ReplyGenerator,
    Style,
    amplify_manually,
    language_name,
    pick_fallback_phrase,
)

__all__ = [
    "ChatBackend",
    "ChatCompletionBackend",
    "GeneratedReply",
    "LLMAuthError",
    "LLMError",
    "LLMTimeoutError",
    "LLMUnavailableError",
    "ReplyGenerator",
    "Style",
    "amplify_manually",
    "language_name",
    "pick_fallback_phrase",
]
