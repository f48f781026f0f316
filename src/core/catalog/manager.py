"""
Catalog management.

Coordinates the metadata store and object storage for the lifecycle of a
video record: create (draft), list, publish/unpublish, delete.

There is no transaction spanning the two stores. Each multi-step
operation is written as independent steps with their own failure
handling:
- create trusts the client's claim that the upload finished, unless
  upload verification is switched on
- delete treats the metadata store as authoritative and storage cleanup
  as advisory

Concurrent publish toggles on the same id are last-writer-wins; no
version token is used.
"""

import asyncio
import logging
import math
from typing import Optional

from .errors import NotFoundError, ValidationError
from .interfaces import ObjectStorage, VideoStore
from .models import DEFAULT_MIME_TYPE, NewVideo, PlaybackEntry, VideoRecord, utcnow
from .playback import PlaybackUrlIssuer
from .upstream import call_upstream

logger = logging.getLogger(__name__)


class CatalogManager:
    """
    Use cases for the video catalog.

    Store methods are blocking and run via asyncio.to_thread; storage
    methods are already coroutines. Both go through call_upstream so a
    slow or failing collaborator surfaces as UpstreamUnavailableError.
    """

    def __init__(
        self,
        store: VideoStore,
        storage: ObjectStorage,
        playback: PlaybackUrlIssuer,
        timeout_seconds: float = 10.0,
        verify_uploads: bool = False,
    ) -> None:
        self._store = store
        self._storage = storage
        self._playback = playback
        self._timeout = timeout_seconds
        self._verify_uploads = verify_uploads

    async def _store_call(self, operation: str, func, *args):
        return await call_upstream(
            operation,
            asyncio.to_thread(func, *args),
            self._timeout,
        )

    # -----------------------------------------------------------------------
    # Create
    # -----------------------------------------------------------------------

    async def create_record(
        self,
        title: Optional[str],
        storage_key: Optional[str],
        description: Optional[str] = None,
        size_bytes: Optional[int] = None,
        mime_type: Optional[str] = None,
        duration_seconds: Optional[float] = None,
        poster_url: Optional[str] = None,
    ) -> VideoRecord:
        """
        Record metadata for an uploaded object. Always starts unpublished.

        Not idempotent: calling twice creates two records for the same key.
        """
        if not title or not title.strip():
            raise ValidationError("title", "is required")
        if not storage_key or not storage_key.strip():
            raise ValidationError("storageKey", "is required")
        if size_bytes is not None and size_bytes < 0:
            raise ValidationError("sizeBytes", "must be a non-negative integer")
        if duration_seconds is not None and (not math.isfinite(duration_seconds) or duration_seconds < 0):
            raise ValidationError("durationSeconds", "must be a finite, non-negative number")

        video = NewVideo(
            title=title.strip(),
            storage_key=storage_key.strip(),
            description=description or "",
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            size_bytes=size_bytes or 0,
            duration_seconds=duration_seconds or 0.0,
            poster_url=poster_url or "",
        )

        if self._verify_uploads:
            exists = await call_upstream(
                "object_exists",
                self._storage.object_exists(video.storage_key),
                self._timeout,
            )
            if not exists:
                raise ValidationError("storageKey", "no uploaded object found for this key")

        record = await self._store_call("insert_video", self._store.insert, video, utcnow())

        logger.info(
            "Video record created",
            extra={
                "video_id": record.id,
                "storage_key": record.storage_key,
                "size_bytes": record.size_bytes,
            }
        )

        return record

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------

    async def list_published(self) -> list[VideoRecord]:
        """Published records, newest first."""
        records = await self._store_call("list_published", self._store.list_videos, True)
        return [r for r in records if r.published]

    async def list_all(self) -> list[VideoRecord]:
        """Every record regardless of state, newest first."""
        return await self._store_call("list_all", self._store.list_videos, False)

    async def list_published_for_playback(self) -> list[PlaybackEntry]:
        """
        Published records paired with fresh stream URLs.

        Reading and signing are not atomic; a record unpublished in between
        still gets a URL for this response.
        """
        records = await self.list_published()
        entries = await self._playback.sign_all(records)

        logger.debug(
            "Signed public listing",
            extra={"published": len(records), "signed": len(entries)}
        )

        return entries

    # -----------------------------------------------------------------------
    # Update
    # -----------------------------------------------------------------------

    async def set_published(self, video_id: str, published: bool) -> VideoRecord:
        """Set the publish flag. Setting the current value only bumps updated_at."""
        record = await self._store_call(
            "update_published",
            self._store.update_published,
            video_id,
            bool(published),
            utcnow(),
        )
        if record is None:
            raise NotFoundError(video_id)

        logger.info(
            "Publish state changed",
            extra={"video_id": video_id, "published": record.published}
        )

        return record

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------

    async def delete_record(self, video_id: str) -> None:
        """
        Delete the record and, best-effort, its storage object.

        Storage failure is logged and ignored. Metadata failure propagates.
        """
        record = await self._store_call("get_video", self._store.get, video_id)
        if record is None:
            raise NotFoundError(video_id)

        try:
            await call_upstream(
                "delete_object",
                self._storage.delete_object(record.storage_key),
                self._timeout,
            )
        except Exception as e:
            logger.warning(
                "Storage delete skipped, removing record anyway",
                extra={
                    "video_id": video_id,
                    "storage_key": record.storage_key,
                    "error": str(e),
                }
            )

        deleted = await self._store_call("delete_video", self._store.delete, video_id)
        if not deleted:
            # Removed by a concurrent request between lookup and delete.
            raise NotFoundError(video_id)

        logger.info(
            "Video record deleted",
            extra={"video_id": video_id, "storage_key": record.storage_key}
        )
