"""
Snowflake repository for video records.

The repository:
1. Translates between VideoRecord and rows in the `videos` table
2. Encapsulates all SQL
3. Assigns record ids (UUID4) on insert

The catalog never writes SQL directly — it asks the repository for what
it needs in domain terms. Unknown ids come back as None / False rather
than exceptions; the catalog decides what "not found" means.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol
from uuid import uuid4

from src.core.catalog.models import NewVideo, VideoRecord


logger = logging.getLogger(__name__)


# Column order shared by every SELECT and the INSERT
VIDEO_COLUMNS = (
    "video_id",
    "title",
    "description",
    "storage_key",
    "mime_type",
    "size_bytes",
    "duration_seconds",
    "poster_url",
    "published",
    "created_at",
    "updated_at",
)

_SELECT_COLUMNS = ", ".join(VIDEO_COLUMNS)


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    database: str = "BALUPLIX"
    schema: str = "CATALOG"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VideoRepository:
    """
    Repository for video record persistence.

    Each method corresponds to a use case the catalog needs. Writes are
    committed immediately; there are no multi-statement transactions.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def insert(self, video: NewVideo, now: datetime) -> VideoRecord:
        """Insert a new unpublished record."""
        record = VideoRecord(
            id=str(uuid4()),
            title=video.title,
            storage_key=video.storage_key,
            description=video.description,
            mime_type=video.mime_type,
            size_bytes=video.size_bytes,
            duration_seconds=video.duration_seconds,
            poster_url=video.poster_url,
            published=False,
            created_at=now,
            updated_at=now,
        )

        cursor = self._conn.cursor()
        try:
            placeholders = ", ".join(["%s"] * len(VIDEO_COLUMNS))
            cursor.execute(
                f"INSERT INTO videos ({_SELECT_COLUMNS}) VALUES ({placeholders})",
                self._to_row(record),
            )
            self._conn.commit()
        except Exception as e:
            logger.error(
                "Failed to insert video",
                extra={"video_id": record.id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

        return record

    def get(self, video_id: str) -> Optional[VideoRecord]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(
                f"SELECT {_SELECT_COLUMNS} FROM videos WHERE video_id = %s",
                (video_id,),
            )
            row = cursor.fetchone()
            return self._from_row(row) if row else None
        finally:
            cursor.close()

    def list_videos(self, published_only: bool = False) -> list[VideoRecord]:
        """Records newest first. No pagination."""
        cursor = self._conn.cursor()
        try:
            where = "WHERE published = TRUE " if published_only else ""
            cursor.execute(
                f"SELECT {_SELECT_COLUMNS} FROM videos {where}ORDER BY created_at DESC"
            )
            return [self._from_row(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def update_published(
        self,
        video_id: str,
        published: bool,
        updated_at: datetime,
    ) -> Optional[VideoRecord]:
        """
        Set the publish flag and refresh updated_at.

        A single UPDATE by primary key; concurrent toggles are
        last-writer-wins.
        """
        cursor = self._conn.cursor()
        try:
            cursor.execute(
                "UPDATE videos SET published = %s, updated_at = %s WHERE video_id = %s",
                (published, updated_at, video_id),
            )
            updated = cursor.rowcount
            self._conn.commit()
        except Exception as e:
            logger.error(
                "Failed to update publish state",
                extra={"video_id": video_id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

        if not updated:
            return None
        return self.get(video_id)

    def delete(self, video_id: str) -> bool:
        cursor = self._conn.cursor()
        try:
            cursor.execute("DELETE FROM videos WHERE video_id = %s", (video_id,))
            deleted = cursor.rowcount
            self._conn.commit()
        except Exception as e:
            logger.error(
                "Failed to delete video",
                extra={"video_id": video_id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

        return bool(deleted)

    def ping(self) -> bool:
        """Cheap round trip for readiness checks."""
        cursor = self._conn.cursor()
        try:
            cursor.execute("SELECT 1")
            return cursor.fetchone() is not None
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    @staticmethod
    def _to_row(record: VideoRecord) -> tuple:
        return (
            record.id,
            record.title,
            record.description,
            record.storage_key,
            record.mime_type,
            record.size_bytes,
            record.duration_seconds,
            record.poster_url,
            record.published,
            record.created_at,
            record.updated_at,
        )

    @staticmethod
    def _from_row(row: tuple) -> VideoRecord:
        (
            video_id, title, description, storage_key, mime_type, size_bytes,
            duration_seconds, poster_url, published, created_at, updated_at,
        ) = row
        return VideoRecord(
            id=str(video_id),
            title=title,
            storage_key=storage_key,
            description=description or "",
            mime_type=mime_type or "video/mp4",
            size_bytes=int(size_bytes or 0),
            duration_seconds=float(duration_seconds or 0),
            poster_url=poster_url or "",
            published=bool(published),
            created_at=_as_utc(created_at),
            updated_at=_as_utc(updated_at),
        )
