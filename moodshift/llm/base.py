"""Backend abstraction for reply generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moodshift.remote_config import LLMConfig


class LLMError(RuntimeError):
    """Base error for LLM backend failures."""


class LLMTimeoutError(LLMError):
    """Raised when generation exceeds the configured timeout."""


class LLMUnavailableError(LLMError):
    """Raised when the provider cannot be reached."""


class LLMAuthError(LLMError):
    """Raised when the provider rejects or is missing credentials."""


class ChatBackend(ABC):
    """Async chat-completion interface used by the reply generator."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    async def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, str]],
        config: LLMConfig,
        *,
        temperature: float | None = None,
        frequency_penalty: float | None = None,
        presence_penalty: float | None = None,
    ) -> str:
        """Return the raw content of the first choice.

        Keyword overrides replace the matching ``config`` values for this
        call only.
        """
        raise NotImplementedError

    def debug_snapshot(self) -> dict:
        return {"backend": self.backend_name, "loaded": False}
