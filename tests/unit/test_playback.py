"""
Tests for signed playback URLs.

Expiry is checked by MockStorageClient with zero clock-skew tolerance:
a URL is accepted while now <= expires and rejected one second later.
Real S3 behaves the same way for X-Amz-Expires relative to the signing
time.
"""

import pytest

from src.core.catalog import PlaybackUrlIssuer, VideoRecord
from src.core.catalog.playback import PLAYBACK_URL_EXPIRY_SECONDS
from src.infrastructure.storage.client import MockStorageClient, StorageError


def make_record(storage_key: str, video_id: str = "vid-1") -> VideoRecord:
    return VideoRecord(id=video_id, title="Demo", storage_key=storage_key, published=True)


@pytest.fixture
async def uploaded_record(storage):
    url = await storage.presign_upload("videos/demo.mp4", "video/mp4", 900)
    storage.put(url, b"video-bytes", "video/mp4")
    return make_record("videos/demo.mp4")


class TestSignForPlayback:

    async def test_url_streams_the_object(self, playback, storage, uploaded_record):
        url = await playback.sign_for_playback(uploaded_record)

        assert storage.fetch(url) == b"video-bytes"

    async def test_default_window_is_one_hour(self, playback):
        assert playback.expiry_seconds == PLAYBACK_URL_EXPIRY_SECONDS == 3600

    async def test_valid_up_to_the_window_edge(self, playback, storage, clock, uploaded_record):
        url = await playback.sign_for_playback(uploaded_record)

        clock.advance(PLAYBACK_URL_EXPIRY_SECONDS)

        assert storage.fetch(url) == b"video-bytes"

    async def test_rejected_after_the_window(self, playback, storage, clock, uploaded_record):
        url = await playback.sign_for_playback(uploaded_record)

        clock.advance(PLAYBACK_URL_EXPIRY_SECONDS + 1)

        with pytest.raises(StorageError, match="expired"):
            storage.fetch(url)

    async def test_fresh_url_on_every_call(self, playback, clock, uploaded_record):
        first = await playback.sign_for_playback(uploaded_record)
        clock.advance(30)
        second = await playback.sign_for_playback(uploaded_record)

        assert first != second

    async def test_download_url_cannot_be_used_to_upload(self, playback, storage, uploaded_record):
        url = await playback.sign_for_playback(uploaded_record)

        with pytest.raises(StorageError):
            storage.put(url, b"overwrite", "video/mp4")


class TestSignAll:

    async def test_keeps_order(self, playback):
        records = [make_record(f"videos/{n}.mp4", video_id=str(n)) for n in range(3)]

        entries = await playback.sign_all(records)

        assert [e.video.id for e in entries] == ["0", "1", "2"]
        assert all(e.url for e in entries)

    async def test_omits_records_that_fail_to_sign(self):
        class PartlyBrokenStorage(MockStorageClient):
            async def presign_download(self, storage_key, expiry_seconds):
                if storage_key == "videos/broken.mp4":
                    raise StorageError("bad key")
                return await super().presign_download(storage_key, expiry_seconds)

        playback = PlaybackUrlIssuer(PartlyBrokenStorage())
        records = [
            make_record("videos/a.mp4", video_id="a"),
            make_record("videos/broken.mp4", video_id="broken"),
            make_record("videos/c.mp4", video_id="c"),
        ]

        entries = await playback.sign_all(records)

        assert [e.video.id for e in entries] == ["a", "c"]

    async def test_empty_listing(self, playback):
        assert await playback.sign_all([]) == []
