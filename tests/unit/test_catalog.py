"""
Tests for the catalog workflow: create, list, publish, delete.

Uses the real VideoRepository over the mock Snowflake connection and the
in-memory storage client. Failure paths use small subclasses that break
one call.
"""

import asyncio

import pytest

from src.core.catalog import (
    CatalogManager,
    NotFoundError,
    PlaybackUrlIssuer,
    UpstreamUnavailableError,
    ValidationError,
)
from src.infrastructure.snowflake.client import MockSnowflakeConnection
from src.infrastructure.snowflake.repositories.videos import VideoRepository
from src.infrastructure.storage.client import MockStorageClient, StorageError


def is_newest_first(records) -> bool:
    return all(
        earlier.created_at >= later.created_at
        for earlier, later in zip(records, records[1:])
    )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateRecord:

    async def test_new_record_is_an_unpublished_draft(self, catalog):
        record = await catalog.create_record(
            title="Demo",
            storage_key="videos/123-abc-demo.mp4",
        )

        assert record.id
        assert record.published is False
        assert record.mime_type == "video/mp4"
        assert record.size_bytes == 0
        assert record.created_at == record.updated_at

    async def test_keeps_optional_metadata(self, catalog):
        record = await catalog.create_record(
            title="Demo",
            storage_key="videos/1-a-demo.webm",
            description="Trailer",
            size_bytes=2048,
            mime_type="video/webm",
            duration_seconds=12.5,
            poster_url="https://cdn.example.com/poster.jpg",
        )

        assert record.description == "Trailer"
        assert record.size_bytes == 2048
        assert record.mime_type == "video/webm"
        assert record.duration_seconds == 12.5
        assert record.poster_url == "https://cdn.example.com/poster.jpg"

    async def test_ids_are_unique(self, catalog):
        first = await catalog.create_record(title="A", storage_key="videos/a.mp4")
        second = await catalog.create_record(title="A", storage_key="videos/a.mp4")

        assert first.id != second.id

    async def test_does_not_check_storage_by_default(self, catalog, storage):
        await catalog.create_record(title="Demo", storage_key="videos/never-uploaded.mp4")

        assert storage.keys() == []

    @pytest.mark.parametrize("kwargs, field", [
        ({"title": "", "storage_key": "videos/a.mp4"}, "title"),
        ({"title": None, "storage_key": "videos/a.mp4"}, "title"),
        ({"title": "Demo", "storage_key": "  "}, "storageKey"),
        ({"title": "Demo", "storage_key": "videos/a.mp4", "size_bytes": -5}, "sizeBytes"),
        ({"title": "Demo", "storage_key": "videos/a.mp4", "duration_seconds": -1.0}, "durationSeconds"),
        ({"title": "Demo", "storage_key": "videos/a.mp4", "duration_seconds": float("nan")}, "durationSeconds"),
        ({"title": "Demo", "storage_key": "videos/a.mp4", "duration_seconds": float("inf")}, "durationSeconds"),
    ])
    async def test_invalid_input(self, catalog, kwargs, field):
        with pytest.raises(ValidationError) as exc_info:
            await catalog.create_record(**kwargs)

        assert exc_info.value.field == field
        assert await catalog.list_all() == []


class TestVerifiedUploads:
    """Optional hardening: refuse metadata for objects that were never uploaded."""

    @pytest.fixture
    def strict_catalog(self, repository, storage, playback):
        return CatalogManager(repository, storage, playback, verify_uploads=True)

    async def test_rejects_missing_object(self, strict_catalog):
        with pytest.raises(ValidationError) as exc_info:
            await strict_catalog.create_record(title="Demo", storage_key="videos/missing.mp4")

        assert exc_info.value.field == "storageKey"

    async def test_accepts_uploaded_object(self, strict_catalog, storage):
        url = await storage.presign_upload("videos/here.mp4", "video/mp4", 900)
        storage.put(url, b"data", "video/mp4")

        record = await strict_catalog.create_record(title="Demo", storage_key="videos/here.mp4")

        assert record.storage_key == "videos/here.mp4"


# ---------------------------------------------------------------------------
# Listing and publishing
# ---------------------------------------------------------------------------

class TestListing:

    async def test_list_all_is_newest_first(self, catalog):
        first = await catalog.create_record(title="First", storage_key="videos/1.mp4")
        second = await catalog.create_record(title="Second", storage_key="videos/2.mp4")
        third = await catalog.create_record(title="Third", storage_key="videos/3.mp4")

        records = await catalog.list_all()

        assert [r.id for r in records] == [third.id, second.id, first.id]
        assert is_newest_first(records)

    async def test_list_published_only_returns_published(self, catalog):
        draft = await catalog.create_record(title="Draft", storage_key="videos/d.mp4")
        live = await catalog.create_record(title="Live", storage_key="videos/l.mp4")
        await catalog.set_published(live.id, True)

        records = await catalog.list_published()

        assert [r.id for r in records] == [live.id]
        assert all(r.published for r in records)
        assert draft.id not in {r.id for r in records}

    async def test_list_published_order(self, catalog):
        ids = []
        for n in range(4):
            record = await catalog.create_record(title=f"V{n}", storage_key=f"videos/{n}.mp4")
            await catalog.set_published(record.id, True)
            ids.append(record.id)

        records = await catalog.list_published()

        assert [r.id for r in records] == list(reversed(ids))
        assert is_newest_first(records)


class TestSetPublished:

    async def test_publish_then_unpublish(self, catalog):
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")

        published = await catalog.set_published(record.id, True)
        assert published.published is True
        assert record.id in {r.id for r in await catalog.list_published()}

        unpublished = await catalog.set_published(record.id, False)
        assert unpublished.published is False
        assert record.id not in {r.id for r in await catalog.list_published()}

    async def test_same_value_only_refreshes_updated_at(self, catalog):
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")

        again = await catalog.set_published(record.id, False)

        assert again.published is False
        assert again.updated_at >= record.updated_at
        assert again.created_at == record.created_at
        assert again.storage_key == record.storage_key

    async def test_unknown_id(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.set_published("no-such-id", True)

    async def test_concurrent_toggles_last_writer_wins(self, catalog):
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")

        results = await asyncio.gather(
            catalog.set_published(record.id, True),
            catalog.set_published(record.id, False),
        )

        final = {r.id: r for r in await catalog.list_all()}[record.id]
        assert final.published in {r.published for r in results}


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class TestDeleteRecord:

    async def test_removes_record_and_object(self, catalog, storage):
        url = await storage.presign_upload("videos/demo.mp4", "video/mp4", 900)
        storage.put(url, b"data", "video/mp4")
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")

        await catalog.delete_record(record.id)

        assert await catalog.list_all() == []
        assert storage.keys() == []

    async def test_second_delete_is_not_found(self, catalog):
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")
        await catalog.delete_record(record.id)

        with pytest.raises(NotFoundError):
            await catalog.delete_record(record.id)

    async def test_unknown_id(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.delete_record("no-such-id")

    async def test_storage_failure_does_not_block_delete(self, repository, playback):
        class StuckStorage(MockStorageClient):
            async def delete_object(self, storage_key):
                raise StorageError("access denied")

        catalog = CatalogManager(repository, StuckStorage(), playback)
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")

        await catalog.delete_record(record.id)

        assert await catalog.list_all() == []

    async def test_metadata_failure_is_surfaced(self, storage, playback):
        class FailingRepository(VideoRepository):
            def delete(self, video_id):
                raise RuntimeError("warehouse suspended")

        catalog = CatalogManager(
            FailingRepository(MockSnowflakeConnection()),
            storage,
            playback,
        )
        record = await catalog.create_record(title="Demo", storage_key="videos/demo.mp4")

        with pytest.raises(UpstreamUnavailableError):
            await catalog.delete_record(record.id)


# ---------------------------------------------------------------------------
# Upstream failures
# ---------------------------------------------------------------------------

class TestUpstreamFailures:

    async def test_store_error_becomes_upstream_unavailable(self, storage, playback):
        class DownRepository(VideoRepository):
            def list_videos(self, published_only=False):
                raise ConnectionError("connection reset")

        catalog = CatalogManager(DownRepository(MockSnowflakeConnection()), storage, playback)

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await catalog.list_all()

        assert exc_info.value.operation == "list_all"

    async def test_slow_store_times_out(self, storage, playback):
        class SlowRepository(VideoRepository):
            def list_videos(self, published_only=False):
                import time
                time.sleep(0.5)
                return []

        catalog = CatalogManager(
            SlowRepository(MockSnowflakeConnection()),
            storage,
            playback,
            timeout_seconds=0.05,
        )

        with pytest.raises(UpstreamUnavailableError):
            await catalog.list_published()


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------

async def test_full_lifecycle(catalog):
    record = await catalog.create_record(title="Demo", storage_key="videos/123-abc-demo.mp4")

    assert record.id in {r.id for r in await catalog.list_all()}
    assert record.id not in {r.id for r in await catalog.list_published()}

    await catalog.set_published(record.id, True)

    entries = await catalog.list_published_for_playback()
    assert [e.video.id for e in entries] == [record.id]
    assert entries[0].url

    await catalog.delete_record(record.id)

    assert await catalog.list_all() == []
    assert await catalog.list_published_for_playback() == []
