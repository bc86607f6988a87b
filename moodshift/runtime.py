"""Wiring of the long-lived service objects shared by all requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from moodshift.cache import ArtifactCache
from moodshift.config import settings
from moodshift.conversation import ConversationStore
from moodshift.llm import ChatBackend, ChatCompletionBackend, ReplyGenerator, Style
from moodshift.pipeline import ResponsePipeline
from moodshift.remote_config import ConfigProvider
from moodshift.storage import BlobStore, DocumentStore
from moodshift.tts.base import Synthesizer
from moodshift.tts.polly import PollySynthesizer

log = logging.getLogger(__name__)

DOCUMENTS_FILENAME = "documents.db"
BLOBS_DIRNAME = "blobs"


@dataclass(slots=True)
class Runtime:
    documents: DocumentStore
    blobs: BlobStore
    config: ConfigProvider
    cache: ArtifactCache
    conversations: ConversationStore
    llm: ChatBackend
    synthesizer: Synthesizer
    pipeline: ResponsePipeline

    async def start(self) -> None:
        await self.llm.start()

    async def close(self) -> None:
        await self.cache.drain()
        await self.synthesizer.close()
        await self.llm.close()

    def debug_snapshot(self) -> dict:
        return {
            "llm": self.llm.debug_snapshot(),
            "tts": self.synthesizer.debug_snapshot(),
            "config": self.config.debug_snapshot(),
        }


def open_document_store(data_dir: str | Path = settings.data_dir) -> DocumentStore:
    return DocumentStore(Path(data_dir) / DOCUMENTS_FILENAME)


def build_runtime(
    data_dir: str | Path = settings.data_dir,
    *,
    llm_transport: httpx.AsyncBaseTransport | None = None,
    polly_transport: httpx.AsyncBaseTransport | None = None,
) -> Runtime:
    """Create stores, clients and the pipeline rooted at ``data_dir``."""
    root = Path(data_dir)
    documents = open_document_store(root)
    blobs = BlobStore(root / BLOBS_DIRNAME)
    config = ConfigProvider(documents, ttl_s=settings.config_ttl_s)
    cache = ArtifactCache(
        blobs,
        documents,
        bucket=settings.storage_bucket,
        prefix=settings.cache_prefix,
        public_base_url=settings.public_base_url,
        max_age_s=settings.cache_max_age_s,
        track_hits=settings.track_cache_hits,
    )
    conversations = ConversationStore(
        documents, max_messages=settings.conversation_max_messages
    )
    llm = ChatCompletionBackend(settings.groq_api_key, transport=llm_transport)
    synthesizer = PollySynthesizer(
        settings.aws_access_key,
        settings.aws_secret_key,
        endpoint_template=settings.polly_endpoint_template,
        transport=polly_transport,
    )
    pipeline = ResponsePipeline(
        cache=cache,
        config=config,
        conversations=conversations,
        replies=ReplyGenerator(llm, default_style=Style(settings.default_style)),
        synthesizer=synthesizer,
    )
    log.info("Runtime ready (data_dir=%s)", root.resolve())
    return Runtime(
        documents=documents,
        blobs=blobs,
        config=config,
        cache=cache,
        conversations=conversations,
        llm=llm,
        synthesizer=synthesizer,
        pipeline=pipeline,
    )
