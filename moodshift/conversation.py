"""Per-device conversation memory for reply generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from moodshift.config import settings
from moodshift.storage import DocumentStore, StorageError

log = logging.getLogger(__name__)

CONVERSATIONS_COLLECTION = "conversations"
LANGUAGE_NAME_TOKEN = "$languageName"

Role = Literal["user", "assistant"]


@dataclass(slots=True)
class ConversationMessage:
    role: Role
    content: str
    timestamp: str

    def to_document(self) -> dict:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_document(cls, doc: dict) -> ConversationMessage | None:
        role = doc.get("role")
        content = doc.get("content")
        if role not in ("user", "assistant") or not isinstance(content, str):
            return None
        return cls(role=role, content=content, timestamp=str(doc.get("timestamp", "")))


class ConversationStore:
    """Bounded FIFO message history keyed by device id.

    Storage failures never reach the caller: reads degrade to an empty
    history and writes are logged and dropped.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        max_messages: int = settings.conversation_max_messages,
    ) -> None:
        if max_messages < 2 or max_messages % 2:
            raise ValueError("max_messages must be an even number >= 2")
        self._store = store
        self.max_messages = max_messages

    async def read(self, device_id: str) -> list[ConversationMessage]:
        try:
            doc = await self._store.get(CONVERSATIONS_COLLECTION, device_id)
        except StorageError:
            log.exception("Error getting conversation history for %s", device_id)
            return []
        if doc is None:
            return []
        return _parse_messages(doc)

    async def append(self, device_id: str, user_text: str, assistant_text: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        pair = [
            ConversationMessage(role="user", content=user_text, timestamp=now),
            ConversationMessage(role="assistant", content=assistant_text, timestamp=now),
        ]

        def add_pair(doc: dict | None) -> dict:
            messages = _parse_messages(doc) if doc else []
            messages.extend(pair)
            messages = messages[-self.max_messages :]
            return {
                "deviceId": device_id,
                "messages": [m.to_document() for m in messages],
                "lastActivity": now,
            }

        try:
            await self._store.update(CONVERSATIONS_COLLECTION, device_id, add_pair)
        except StorageError:
            log.exception("Error saving conversation for %s", device_id)
            return
        log.debug("Conversation saved for %s", device_id)

    async def clear(self, device_id: str) -> bool:
        try:
            removed = await self._store.delete(CONVERSATIONS_COLLECTION, device_id)
        except StorageError:
            log.exception("Error clearing conversation for %s", device_id)
            return False
        log.info("Conversation cleared for %s", device_id)
        return removed


def _parse_messages(doc: dict) -> list[ConversationMessage]:
    raw = doc.get("messages")
    if not isinstance(raw, list):
        return []
    parsed = (ConversationMessage.from_document(m) for m in raw if isinstance(m, dict))
    return [m for m in parsed if m is not None]


def build_messages(
    history: list[ConversationMessage],
    user_text: str,
    system_prompt: str,
    language_name: str,
) -> list[dict[str, str]]:
    """Assemble the chat transcript sent to the model.

    The most recent stored pair is left out of the replayed history; the
    current user message always goes last.
    """
    messages = [
        {
            "role": "system",
            "content": system_prompt.replace(LANGUAGE_NAME_TOKEN, language_name),
        }
    ]
    messages.extend({"role": m.role, "content": m.content} for m in history[:-2])
    messages.append({"role": "user", "content": user_text})
    return messages
