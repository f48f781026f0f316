"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- The admin secret is read from settings in exactly one place

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated, Generator, Optional

from fastapi import Depends, Request, Security
from fastapi.routing import APIRoute
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.catalog import (
    AdminGate,
    CatalogManager,
    ObjectStorage,
    PlaybackUrlIssuer,
    UploadCoordinator,
)
from ..infrastructure.snowflake.client import (
    MockSnowflakeConnection,
    create_snowflake_connection,
)
from ..infrastructure.snowflake.repositories.videos import SnowflakeConfig, VideoRepository
from ..infrastructure.storage.client import StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"
ADMIN_TOKEN_BODY_FIELD = "adminToken"

admin_token_header = APIKeyHeader(name=ADMIN_TOKEN_HEADER, auto_error=False)

# Shared instances. Mock backends must persist across requests, and the
# S3 client is safe to reuse.
_mock_snowflake_connection: Optional[MockSnowflakeConnection] = None
_storage_client: Optional[ObjectStorage] = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def get_admin_gate(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AdminGate:
    """Build the gate from the configured secret."""
    return AdminGate(settings.admin_token)


async def _token_from_body(request: Request) -> Optional[str]:
    """Fallback: `adminToken` in a JSON request body."""
    if request.method in ("GET", "HEAD"):
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        token = body.get(ADMIN_TOKEN_BODY_FIELD)
        return token if isinstance(token, str) else None
    return None


async def require_admin(
    request: Request,
    gate: Annotated[AdminGate, Depends(get_admin_gate)],
    header_token: Optional[str] = Security(admin_token_header),
) -> None:
    """
    Reject the request unless it carries the admin secret.

    Runs before the handler, so an unauthorized call never reaches the
    metadata store or object storage.
    """
    token = header_token or await _token_from_body(request)
    gate.check(token)


def route_requires_admin(request: Request) -> bool:
    """Whether the route matched for `request` is gated by require_admin."""
    endpoint = request.scope.get("endpoint")
    if endpoint is None:
        return False
    for route in request.app.routes:
        if isinstance(route, APIRoute) and route.endpoint is endpoint:
            return any(dep.call is require_admin for dep in route.dependant.dependencies)
    return False


def check_admin_header(request: Request) -> None:
    """
    Header-only admin check for requests whose body could not be parsed.

    FastAPI decodes the JSON body before any dependency runs, so a
    malformed body would otherwise be reported ahead of the auth failure.
    """
    settings_provider = request.app.dependency_overrides.get(get_settings, get_settings)
    gate = AdminGate(settings_provider().admin_token)
    gate.check(request.headers.get(ADMIN_TOKEN_HEADER))


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ObjectStorage:
    """
    Provide the object storage client.

    In mock mode the same in-memory client is reused so that uploaded
    objects persist for the life of the process.
    """
    global _storage_client

    if _storage_client is None:
        if settings.storage_mock_mode:
            _storage_client = create_storage_client(mock_mode=True)
            logger.info("Created shared mock storage client")
        else:
            config = StorageConfig(
                access_key_id=settings.s3_access_key_id,
                secret_access_key=settings.s3_secret_access_key,
                bucket_name=settings.s3_bucket_name,
                region=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
            )
            _storage_client = create_storage_client(config=config)

    return _storage_client


def get_video_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[VideoRepository, None, None]:
    """
    Provide VideoRepository with database connection.

    A generator so the connection is closed after the request. In mock
    mode one in-memory connection is shared so data persists between
    requests.
    """
    global _mock_snowflake_connection

    if settings.snowflake_mock_mode:
        if _mock_snowflake_connection is None:
            _mock_snowflake_connection = MockSnowflakeConnection()
            logger.info("Created shared mock Snowflake connection")
        yield VideoRepository(_mock_snowflake_connection)
    else:
        config = SnowflakeConfig(
            account=settings.snowflake_account,
            user=settings.snowflake_user,
            password=settings.snowflake_password or None,
            private_key_path=settings.snowflake_private_key_path,
            database=settings.snowflake_database,
            schema=settings.snowflake_schema,
            warehouse=settings.snowflake_warehouse,
            role=settings.snowflake_role,
        )

        with create_snowflake_connection(config=config) as conn:
            yield VideoRepository(conn)


def reset_shared_clients() -> None:
    """Drop shared clients (tests call this between cases)."""
    global _mock_snowflake_connection, _storage_client
    _mock_snowflake_connection = None
    _storage_client = None


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_upload_coordinator(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[ObjectStorage, Depends(get_storage_client)],
) -> UploadCoordinator:
    return UploadCoordinator(
        storage=storage,
        key_prefix=settings.storage_key_prefix,
        expiry_seconds=settings.upload_url_expiry_seconds,
        timeout_seconds=settings.upstream_timeout_seconds,
    )


def get_playback_issuer(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[ObjectStorage, Depends(get_storage_client)],
) -> PlaybackUrlIssuer:
    return PlaybackUrlIssuer(
        storage=storage,
        expiry_seconds=settings.playback_url_expiry_seconds,
        timeout_seconds=settings.upstream_timeout_seconds,
    )


def get_catalog_manager(
    settings: Annotated[Settings, Depends(get_settings)],
    repository: Annotated[VideoRepository, Depends(get_video_repository)],
    storage: Annotated[ObjectStorage, Depends(get_storage_client)],
    playback: Annotated[PlaybackUrlIssuer, Depends(get_playback_issuer)],
) -> CatalogManager:
    """
    Provide the catalog service.

    Stateless, so a new instance per request is fine.
    """
    return CatalogManager(
        store=repository,
        storage=storage,
        playback=playback,
        timeout_seconds=settings.upstream_timeout_seconds,
        verify_uploads=settings.verify_uploads,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AdminOnly = Depends(require_admin)
SettingsDep = Annotated[Settings, Depends(get_settings)]
VideoRepositoryDep = Annotated[VideoRepository, Depends(get_video_repository)]
UploadCoordinatorDep = Annotated[UploadCoordinator, Depends(get_upload_coordinator)]
CatalogManagerDep = Annotated[CatalogManager, Depends(get_catalog_manager)]
