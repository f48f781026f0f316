"""
Domain models for the video catalog.

These have no dependencies on FastAPI, Snowflake or boto3. The repository
and the API layer translate to and from them.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_MIME_TYPE = "video/mp4"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VideoRecord:
    """
    A single catalog entry, as read back from the metadata store.

    Frozen because records are snapshots: the only change after creation is
    the publish flag, which the store updates in place and then re-reads.
    `storage_key` is fixed at creation and never rewritten.
    """
    id: str
    title: str
    storage_key: str
    description: str = ""
    mime_type: str = DEFAULT_MIME_TYPE
    size_bytes: int = 0
    duration_seconds: float = 0.0
    poster_url: str = ""
    published: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Video title cannot be empty")
        if not self.storage_key.strip():
            raise ValueError("Storage key cannot be empty")
        if self.size_bytes < 0:
            raise ValueError("Size cannot be negative")
        if not math.isfinite(self.duration_seconds) or self.duration_seconds < 0:
            raise ValueError("Duration must be a finite, non-negative number")


@dataclass(frozen=True)
class NewVideo:
    """Metadata supplied by the admin after a direct-to-storage upload."""
    title: str
    storage_key: str
    description: str = ""
    mime_type: str = DEFAULT_MIME_TYPE
    size_bytes: int = 0
    duration_seconds: float = 0.0
    poster_url: str = ""


@dataclass(frozen=True)
class UploadTarget:
    """Where the client should PUT the file, and the key to report back."""
    upload_url: str
    storage_key: str
    expires_in: int


@dataclass(frozen=True)
class PlaybackEntry:
    """A published record paired with a freshly signed stream URL."""
    video: VideoRecord
    url: str
