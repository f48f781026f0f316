"""
Shared fixtures.

Everything runs against the in-memory backends: MockStorageClient for
object storage and MockSnowflakeConnection behind a real VideoRepository.
No network, no credentials.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import reset_shared_clients
from src.config.settings import Settings
from src.core.catalog import CatalogManager, PlaybackUrlIssuer, UploadCoordinator
from src.infrastructure.snowflake.client import MockSnowflakeConnection
from src.infrastructure.snowflake.repositories.videos import VideoRepository
from src.infrastructure.storage.client import MockStorageClient

ADMIN_TOKEN = "test-admin-secret"


class FakeClock:
    """Controllable epoch-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage(clock) -> MockStorageClient:
    return MockStorageClient(clock=clock)


@pytest.fixture
def repository() -> VideoRepository:
    return VideoRepository(MockSnowflakeConnection())


@pytest.fixture
def playback(storage) -> PlaybackUrlIssuer:
    return PlaybackUrlIssuer(storage)


@pytest.fixture
def catalog(repository, storage, playback) -> CatalogManager:
    return CatalogManager(store=repository, storage=storage, playback=playback)


@pytest.fixture
def coordinator(storage, clock) -> UploadCoordinator:
    return UploadCoordinator(storage, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        admin_token=ADMIN_TOKEN,
        storage_mock_mode=True,
        snowflake_mock_mode=True,
    )


@pytest.fixture
def client(settings):
    """TestClient over a fresh app with empty mock backends."""
    from src.main import create_app

    reset_shared_clients()
    with TestClient(create_app(settings)) as test_client:
        yield test_client
    reset_shared_clients()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Token": ADMIN_TOKEN}
