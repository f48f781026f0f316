"""
Interfaces the catalog needs from the outside world.

Using Protocols here means the catalog doesn't know whether records live in
Snowflake or in a test double, or whether objects live in S3, R2 or memory.
"""

from datetime import datetime
from typing import Optional, Protocol

from .models import NewVideo, VideoRecord


class VideoStore(Protocol):
    """
    Metadata store for video records.

    Methods are synchronous (database drivers are), so the catalog runs
    them in a worker thread.
    """

    def insert(self, video: NewVideo, now: datetime) -> VideoRecord:
        """Persist a new unpublished record and return it with its id."""
        ...

    def get(self, video_id: str) -> Optional[VideoRecord]:
        """Load a record, or None if the id is unknown."""
        ...

    def list_videos(self, published_only: bool = False) -> list[VideoRecord]:
        """Records ordered by created_at, newest first."""
        ...

    def update_published(
        self,
        video_id: str,
        published: bool,
        updated_at: datetime,
    ) -> Optional[VideoRecord]:
        """Set the publish flag. None if the id is unknown."""
        ...

    def delete(self, video_id: str) -> bool:
        """Remove a record. False if nothing was deleted."""
        ...


class ObjectStorage(Protocol):
    """Object storage operations used by the upload and playback paths."""

    async def presign_upload(
        self,
        storage_key: str,
        content_type: str,
        expiry_seconds: int,
    ) -> str:
        """Presigned PUT URL scoped to one key and content type."""
        ...

    async def presign_download(
        self,
        storage_key: str,
        expiry_seconds: int,
    ) -> str:
        """Presigned GET URL for one key."""
        ...

    async def delete_object(self, storage_key: str) -> None:
        """Delete one object. Deleting a missing key is not an error."""
        ...

    async def object_exists(self, storage_key: str) -> bool:
        """Whether an object has been uploaded under the key."""
        ...
