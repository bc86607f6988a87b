"""Speech synthesis interface and errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moodshift.remote_config import PollyConfig, VoiceTable


class SynthesisError(RuntimeError):
    """Raised when the speech provider fails to return audio."""

    def __init__(
        self,
        message: str,
        *,
        engine: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.engine = engine
        self.status_code = status_code


class SynthesisTimeoutError(SynthesisError):
    """Raised when a synthesis call exceeds its timeout."""


class SynthesisAuthError(SynthesisError):
    """Raised when credentials are missing or rejected."""


@dataclass(slots=True)
class SynthesisResult:
    audio: bytes
    voice_id: str
    engine: str


class Synthesizer(ABC):
    """Turns speech markup into audio bytes."""

    @abstractmethod
    async def synthesize(
        self,
        markup: str,
        locale: str,
        gender: str,
        preferred_engine: str,
        config: PollyConfig,
        voices: VoiceTable,
    ) -> SynthesisResult:
        raise NotImplementedError

    async def close(self) -> None:
        return None

    def debug_snapshot(self) -> dict:
        return {}
