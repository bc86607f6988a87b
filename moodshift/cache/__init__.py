"""Audio artifact cache exports."""

from moodshift.cache.artifacts import ArtifactCache, CachedArtifact
from moodshift.cache.fingerprint import derive_fingerprint

__all__ = [
    "ArtifactCache",
    "CachedArtifact",
    "derive_fingerprint",
]
