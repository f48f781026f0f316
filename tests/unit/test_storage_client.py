"""
Tests for the storage clients.

The S3 client is exercised offline: presigning needs no network, and
delete/head go through botocore's Stubber.
"""

from urllib.parse import parse_qs, urlsplit

import pytest
from botocore.stub import Stubber

from src.infrastructure.storage.client import (
    MockStorageClient,
    S3StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)


@pytest.fixture
def s3_client() -> S3StorageClient:
    return S3StorageClient(StorageConfig(
        access_key_id="AKIATESTKEY",
        secret_access_key="test-secret",
        bucket_name="test-bucket",
        region="us-east-1",
    ))


class TestS3StorageClient:

    async def test_presigned_upload_is_scoped(self, s3_client):
        url = await s3_client.presign_upload("videos/1-ab-demo.mp4", "video/mp4", 900)

        parts = urlsplit(url)
        query = parse_qs(parts.query)
        assert "videos/1-ab-demo.mp4" in parts.path
        assert query["X-Amz-Expires"] == ["900"]
        assert "content-type" in url.lower()
        assert "x-amz-acl" in url.lower()

    async def test_presigned_download_window(self, s3_client):
        url = await s3_client.presign_download("videos/1-ab-demo.mp4", 3600)

        query = parse_qs(urlsplit(url).query)
        assert query["X-Amz-Expires"] == ["3600"]
        assert query["X-Amz-Algorithm"] == ["AWS4-HMAC-SHA256"]

    async def test_delete_object(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_response(
                "delete_object",
                {},
                {"Bucket": "test-bucket", "Key": "videos/demo.mp4"},
            )

            await s3_client.delete_object("videos/demo.mp4")

            stubber.assert_no_pending_responses()

    async def test_delete_failure_raises_storage_error(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_client_error("delete_object", service_error_code="AccessDenied")

            with pytest.raises(StorageError, match="Delete failed"):
                await s3_client.delete_object("videos/demo.mp4")

    async def test_object_exists(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_response("head_object", {"ContentLength": 10})
            stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)

            assert await s3_client.object_exists("videos/here.mp4") is True
            assert await s3_client.object_exists("videos/gone.mp4") is False


class TestMockStorageClient:

    async def test_put_then_fetch(self, storage):
        put_url = await storage.presign_upload("videos/a.mp4", "video/mp4", 900)
        storage.put(put_url, b"abc", "video/mp4")
        get_url = await storage.presign_download("videos/a.mp4", 3600)

        assert storage.fetch(get_url) == b"abc"
        assert await storage.object_exists("videos/a.mp4")

    async def test_tampered_url_is_rejected(self, storage):
        url = await storage.presign_download("videos/a.mp4", 3600)
        tampered = url.replace("videos/a.mp4", "videos/b.mp4")

        with pytest.raises(StorageError, match="Signature"):
            storage.fetch(tampered)

    async def test_delete_missing_key_is_not_an_error(self, storage):
        await storage.delete_object("videos/never.mp4")

    async def test_fetch_missing_object(self, storage):
        url = await storage.presign_download("videos/none.mp4", 3600)

        with pytest.raises(StorageError, match="not found"):
            storage.fetch(url)


class TestFactory:

    def test_mock_mode(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError):
            create_storage_client()
