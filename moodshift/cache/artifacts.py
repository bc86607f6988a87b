"""Content-addressed audio artifact cache.

Artifacts live in the blob store under ``<prefix>/<fingerprint>.mp3`` with
the reply text, voice and engine in the object's metadata, plus a random
download token that gates the public locator. Reads are best-effort: any
storage problem is a miss. Writes are not: a failed write fails the request.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote

from moodshift.config import settings
from moodshift.storage import BlobObject, BlobStore, DocumentStore, StorageError

log = logging.getLogger(__name__)

STATS_COLLECTION = "cache_stats"
STATS_DOC_ID = "audio_cache"

_CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "ogg_vorbis": "audio/ogg",
    "pcm": "audio/pcm",
}


def content_type_for(output_format: str | None) -> str:
    return _CONTENT_TYPES.get((output_format or "mp3").lower(), "audio/mpeg")


@dataclass(slots=True)
class CachedArtifact:
    response: str
    audio_url: str
    voice_id: str
    engine: str


class ArtifactCache:
    """Maps fingerprints to stored audio plus its reply text."""

    def __init__(
        self,
        blobs: BlobStore,
        documents: DocumentStore,
        *,
        bucket: str = settings.storage_bucket,
        prefix: str = settings.cache_prefix,
        public_base_url: str = settings.public_base_url,
        max_age_s: int = settings.cache_max_age_s,
        track_hits: bool = settings.track_cache_hits,
    ) -> None:
        self._blobs = blobs
        self._documents = documents
        self.bucket = bucket
        self._prefix = prefix.strip("/")
        self._public_base_url = public_base_url.rstrip("/")
        self.cache_control = f"public, max-age={max_age_s}"
        self._track_hits = track_hits
        self._pending: set[asyncio.Task] = set()

    def object_path(self, fingerprint: str) -> str:
        return f"{self._prefix}/{fingerprint}.mp3"

    def locator(self, path: str, token: str) -> str:
        return (
            f"{self._public_base_url}/v0/b/{self.bucket}/o/{quote(path, safe='')}"
            f"?alt=media&token={token}"
        )

    async def lookup(self, fingerprint: str) -> CachedArtifact | None:
        """Return the cached artifact, or None on miss or storage error."""
        path = self.object_path(fingerprint)
        try:
            obj = await self._blobs.stat(path)
        except StorageError:
            log.exception("Cache lookup failed for %s, treating as miss", fingerprint)
            return None
        if obj is None:
            log.debug("Cache miss: %s", fingerprint)
            return None

        token = obj.metadata.get("downloadToken")
        response = obj.metadata.get("response")
        if not token or not response:
            log.warning("Cached object %s lacks token or response metadata", path)
            return None

        log.info("Cache hit: %s", fingerprint)
        if self._track_hits:
            self._spawn_hit_counter()
        return CachedArtifact(
            response=response,
            audio_url=self.locator(path, token),
            voice_id=obj.metadata.get("voiceId", ""),
            engine=obj.metadata.get("engine", ""),
        )

    async def store(
        self,
        fingerprint: str,
        response: str,
        audio: bytes,
        voice_id: str,
        engine: str,
        *,
        output_format: str | None = "mp3",
    ) -> str:
        """Persist audio and metadata, returning a fresh locator.

        Raises StorageError when the write fails.
        """
        path = self.object_path(fingerprint)
        token = str(uuid.uuid4())
        await self._blobs.write(
            path,
            audio,
            content_type=content_type_for(output_format),
            cache_control=self.cache_control,
            metadata={
                "downloadToken": token,
                "response": response,
                "voiceId": voice_id,
                "engine": engine,
            },
        )
        log.info(
            "Cached audio %s (%d bytes, voice=%s, engine=%s)",
            path,
            len(audio),
            voice_id,
            engine,
        )
        return self.locator(path, token)

    async def resolve(self, path: str, token: str) -> tuple[bytes, BlobObject] | None:
        """Return the object bytes when ``token`` matches its download token."""
        try:
            obj = await self._blobs.stat(path)
        except StorageError:
            log.exception("Stat failed for %s", path)
            return None
        if obj is None or not token or obj.metadata.get("downloadToken") != token:
            return None
        try:
            data = await self._blobs.read(path)
        except StorageError:
            log.exception("Read failed for %s", path)
            return None
        if data is None:
            return None
        return data, obj

    async def hit_count(self) -> int | None:
        try:
            doc = await self._documents.get(STATS_COLLECTION, STATS_DOC_ID)
        except StorageError:
            return None
        return int((doc or {}).get("hits", 0))

    async def drain(self) -> None:
        """Wait for outstanding hit-counter updates."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _spawn_hit_counter(self) -> None:
        task = asyncio.create_task(self._record_hit())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record_hit(self) -> None:
        def bump(doc: dict | None) -> dict:
            doc = dict(doc or {})
            doc["hits"] = int(doc.get("hits", 0)) + 1
            doc["lastHitAt"] = datetime.now(timezone.utc).isoformat()
            return doc

        try:
            await self._documents.update(STATS_COLLECTION, STATS_DOC_ID, bump)
        except StorageError:
            log.warning("Failed to update cache hit stats", exc_info=True)
