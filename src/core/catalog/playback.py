"""
Playback URL issuance.

Published videos are streamed straight from the bucket through presigned
GET URLs. URLs are minted on every request and never cached; each listing
call gets its own expiry baseline.
"""

import logging
from typing import Iterable

from .interfaces import ObjectStorage
from .models import PlaybackEntry, VideoRecord
from .upstream import call_upstream

logger = logging.getLogger(__name__)

PLAYBACK_URL_EXPIRY_SECONDS = 60 * 60


class PlaybackUrlIssuer:
    """Signs stream URLs for catalog records."""

    def __init__(
        self,
        storage: ObjectStorage,
        expiry_seconds: int = PLAYBACK_URL_EXPIRY_SECONDS,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._storage = storage
        self._expiry_seconds = expiry_seconds
        self._timeout = timeout_seconds

    @property
    def expiry_seconds(self) -> int:
        return self._expiry_seconds

    async def sign_for_playback(self, record: VideoRecord) -> str:
        """Mint a fresh presigned GET URL for the record's object."""
        return await call_upstream(
            "presign_download",
            self._storage.presign_download(record.storage_key, self._expiry_seconds),
            self._timeout,
        )

    async def sign_all(self, records: Iterable[VideoRecord]) -> list[PlaybackEntry]:
        """
        Sign every record, preserving order.

        A record that cannot be signed is left out and logged, so one
        broken object does not take down the whole public catalog.
        """
        entries: list[PlaybackEntry] = []

        for record in records:
            try:
                url = await self.sign_for_playback(record)
            except Exception as e:
                logger.warning(
                    "Omitting video from listing, signing failed",
                    extra={
                        "video_id": record.id,
                        "storage_key": record.storage_key,
                        "error": str(e),
                    }
                )
                continue
            entries.append(PlaybackEntry(video=record, url=url))

        return entries
