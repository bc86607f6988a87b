"""Filesystem blob store for synthesized audio.

Each object is written as ``<root>/<path>`` with a JSON sidecar
``<root>/<path>.meta.json`` holding its content type, cache control and
custom metadata. Writes go through a temp file and ``os.replace`` so a
reader never sees a half-written object.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from moodshift.storage.base import StorageError

_META_SUFFIX = ".meta.json"


@dataclass(slots=True)
class BlobObject:
    path: str
    content_type: str
    cache_control: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


class BlobStore:
    """Objects addressed by slash-separated paths under one root directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    async def stat(self, path: str) -> BlobObject | None:
        """Return the object's metadata, or None when it does not exist."""
        return await asyncio.to_thread(self._stat_sync, path)

    async def read(self, path: str) -> bytes | None:
        return await asyncio.to_thread(self._read_sync, path)

    async def write(
        self,
        path: str,
        data: bytes,
        *,
        content_type: str,
        cache_control: str = "",
        metadata: dict[str, str] | None = None,
    ) -> BlobObject:
        obj = BlobObject(
            path=path,
            content_type=content_type,
            cache_control=cache_control,
            metadata=dict(metadata or {}),
        )
        await asyncio.to_thread(self._write_sync, obj, data)
        return obj

    def _resolve(self, path: str) -> Path:
        rel = PurePosixPath(path)
        if rel.is_absolute() or not rel.parts or ".." in rel.parts:
            raise StorageError(f"invalid object path: {path!r}")
        return self.root.joinpath(*rel.parts)

    def _stat_sync(self, path: str) -> BlobObject | None:
        target = self._resolve(path)
        meta_path = target.with_name(target.name + _META_SUFFIX)
        try:
            if not target.is_file():
                return None
            raw = meta_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"stat {path} failed: {exc}") from exc
        try:
            meta = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"metadata for {path} is corrupt: {exc}") from exc
        return BlobObject(
            path=path,
            content_type=str(meta.get("contentType", "application/octet-stream")),
            cache_control=str(meta.get("cacheControl", "")),
            metadata={str(k): str(v) for k, v in (meta.get("metadata") or {}).items()},
        )

    def _read_sync(self, path: str) -> bytes | None:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"read {path} failed: {exc}") from exc

    def _write_sync(self, obj: BlobObject, data: bytes) -> None:
        target = self._resolve(obj.path)
        meta = {
            "contentType": obj.content_type,
            "cacheControl": obj.cache_control,
            "metadata": obj.metadata,
        }
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(target, data)
            _atomic_write(
                target.with_name(target.name + _META_SUFFIX),
                json.dumps(meta, ensure_ascii=False).encode("utf-8"),
            )
        except OSError as exc:
            raise StorageError(f"write {obj.path} failed: {exc}") from exc


def _atomic_write(target: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
