"""
Connections for the video catalog table.

`create_snowflake_connection` hands out either a real Snowflake connection
or an in-memory stand-in that understands the handful of statements
VideoRepository issues. Route code only sees the repository.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from .repositories.videos import VIDEO_COLUMNS, SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Could not open a connection to Snowflake."""
    pass


VIDEOS_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS videos (
    video_id STRING NOT NULL PRIMARY KEY,
    title STRING NOT NULL,
    description STRING DEFAULT '',
    storage_key STRING NOT NULL,
    mime_type STRING DEFAULT 'video/mp4',
    size_bytes NUMBER(38, 0) DEFAULT 0,
    duration_seconds FLOAT DEFAULT 0,
    poster_url STRING DEFAULT '',
    published BOOLEAN DEFAULT FALSE,
    created_at TIMESTAMP_TZ NOT NULL,
    updated_at TIMESTAMP_TZ NOT NULL
)
"""


def _load_private_key(key_path: str):
    """
    Load private key from file for key-pair authentication.

    Snowflake wants the key as DER-encoded PKCS8 bytes, not a file path.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    with open(key_path, 'rb') as key_file:
        private_key = serialization.load_pem_private_key(
            key_file.read(),
            password=None,
            backend=default_backend()
        )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If private_key_path is set, uses key-pair auth
    - Otherwise, uses password auth

    Only failures to connect become SnowflakeConnectionError. Errors raised
    by the caller while the connection is open pass through unchanged.

    Usage:
        with get_snowflake_connection(config) as conn:
            repo = VideoRepository(conn)
    """
    try:
        import snowflake.connector
    except ImportError:
        raise ImportError(
            "snowflake-connector-python is required. "
            "Install with: pip install snowflake-connector-python"
        )

    connect_params = {
        'account': config.account,
        'user': config.user,
        'database': config.database,
        'schema': config.schema,
        'warehouse': config.warehouse,
        'role': config.role,
    }

    if config.private_key_path:
        logger.info("Using key-pair authentication for Snowflake")
        connect_params['private_key'] = _load_private_key(config.private_key_path)
    elif config.password:
        logger.info("Using password authentication for Snowflake")
        connect_params['password'] = config.password
    else:
        raise SnowflakeConnectionError(
            "Either password or private_key_path must be provided"
        )

    try:
        conn = snowflake.connector.connect(**connect_params)
    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}")

    logger.debug(
        "Established Snowflake connection",
        extra={
            "account": config.account,
            "database": config.database,
            "schema": config.schema,
        }
    )

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


# ---------------------------------------------------------------------------
# Mock Connection for Local Development
# ---------------------------------------------------------------------------

class MockSnowflakeCursor:
    """
    In-memory cursor over the mock videos table.

    Implements just enough of the cursor interface to support
    VideoRepository without a real database: INSERT, SELECT by id,
    SELECT list (optionally published only), UPDATE of the publish flag,
    DELETE by id, and SELECT 1.
    """

    def __init__(self, storage: dict) -> None:
        self._storage = storage
        self._results: list = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> 'MockSnowflakeCursor':
        """Execute a query against mock storage by pattern matching."""
        logger.debug(
            "Mock query",
            extra={"query": query[:100], "params": params}
        )

        query_upper = " ".join(query.upper().split())
        self._results = []
        self._rowcount = 0

        if query_upper.startswith('INSERT INTO VIDEOS'):
            self._handle_insert(params)
        elif query_upper.startswith('UPDATE VIDEOS'):
            self._handle_update(params)
        elif query_upper.startswith('DELETE FROM VIDEOS'):
            self._handle_delete(params)
        elif query_upper == 'SELECT 1':
            self._results = [(1,)]
        elif query_upper.startswith('SELECT') and 'FROM VIDEOS' in query_upper:
            self._handle_select(query_upper, params)

        return self

    def _row(self, row: dict) -> tuple:
        return tuple(row[column] for column in VIDEO_COLUMNS)

    def _handle_insert(self, params: Optional[tuple]) -> None:
        row = dict(zip(VIDEO_COLUMNS, params))
        self._storage['videos'][row['video_id']] = row
        self._rowcount = 1

    def _handle_update(self, params: Optional[tuple]) -> None:
        published, updated_at, video_id = params
        row = self._storage['videos'].get(str(video_id))
        if row is not None:
            row['published'] = bool(published)
            row['updated_at'] = updated_at
            self._rowcount = 1

    def _handle_delete(self, params: Optional[tuple]) -> None:
        if self._storage['videos'].pop(str(params[0]), None) is not None:
            self._rowcount = 1

    def _handle_select(self, query: str, params: Optional[tuple]) -> None:
        videos = self._storage['videos']

        if 'WHERE VIDEO_ID' in query:
            row = videos.get(str(params[0]))
            self._results = [self._row(row)] if row else []
            return

        rows = list(videos.values())
        if 'WHERE PUBLISHED = TRUE' in query:
            rows = [row for row in rows if row['published']]

        # newest first; ties keep the newest insert first
        rows = sorted(reversed(rows), key=lambda row: row['created_at'], reverse=True)
        self._results = [self._row(row) for row in rows]

    def fetchone(self):
        if not self._results:
            return None
        return self._results[0]

    def fetchall(self) -> list:
        return list(self._results)

    def close(self) -> None:
        pass

    @property
    def rowcount(self) -> int:
        return self._rowcount


class MockSnowflakeConnection:
    """
    In-memory connection shared across requests in mock mode.

    Rows live in a dict keyed by table then video_id. Nothing is persisted
    across restarts.
    """

    def __init__(self) -> None:
        self._storage: dict[str, dict[str, dict]] = {
            'videos': {},
        }

        logger.info("Using in-memory video table")

    def cursor(self) -> MockSnowflakeCursor:
        return MockSnowflakeCursor(self._storage)

    def commit(self) -> None:
        """Writes are applied immediately; nothing to commit."""
        logger.debug("Mock connection commit")

    def rollback(self) -> None:
        logger.debug("Mock connection rollback")

    def close(self) -> None:
        logger.debug("Mock connection close")


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

@contextmanager
def create_snowflake_connection(
    config: Optional[SnowflakeConfig] = None,
    mock_mode: bool = False,
) -> Generator[SnowflakeConnection, None, None]:
    """
    Create Snowflake connection based on configuration.

    Args:
        config: Snowflake configuration (required if not mock_mode)
        mock_mode: If True, yield a fresh in-memory connection

    Yields:
        SnowflakeConnection implementation (real or mock)
    """
    if mock_mode:
        conn = MockSnowflakeConnection()
        try:
            yield conn
        finally:
            conn.close()
    else:
        if config is None:
            raise ValueError("config is required when not in mock mode")

        with get_snowflake_connection(config) as conn:
            yield conn
