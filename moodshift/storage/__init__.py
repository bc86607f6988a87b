"""Persistence package exports."""

from moodshift.storage.base import StorageError
from moodshift.storage.blobs import BlobObject, BlobStore
from moodshift.storage.documents import DocumentStore

__all__ = [
    "StorageError",
    "BlobObject",
    "BlobStore",
    "DocumentStore",
]
