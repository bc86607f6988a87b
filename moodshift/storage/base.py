"""Errors shared by the document and blob stores."""

from __future__ import annotations


class StorageError(RuntimeError):
    """Raised when a document or blob operation fails."""
