"""
Upload coordination.

The server never sees video bytes. It hands the admin a presigned PUT URL
for a freshly generated storage key; the browser uploads straight to the
bucket and later reports the key back when recording metadata.

Nothing is persisted here. An upload target that is never used simply
expires.
"""

import logging
import re
import secrets
import time
from typing import Callable, Optional

from .errors import ValidationError
from .interfaces import ObjectStorage
from .models import UploadTarget
from .upstream import call_upstream

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "videos/"
UPLOAD_URL_EXPIRY_SECONDS = 15 * 60

# 8 random bytes -> 16 hex chars
RANDOM_SUFFIX_BYTES = 8

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """
    Reduce a client-supplied filename to a safe key component.

    Drops any directory part, collapses anything outside [A-Za-z0-9._-]
    into a single dash, and never returns an empty string.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("-", name).strip("-.")
    return name or "video"


def build_storage_key(
    filename: str,
    prefix: str = DEFAULT_KEY_PREFIX,
    now_millis: Optional[int] = None,
) -> str:
    """
    Build `{prefix}{epoch_ms}-{random_hex}-{filename}`.

    Uniqueness comes from the random suffix, not from a lookup.
    """
    if now_millis is None:
        now_millis = int(time.time() * 1000)
    suffix = secrets.token_hex(RANDOM_SUFFIX_BYTES)
    return f"{prefix}{now_millis}-{suffix}-{sanitize_filename(filename)}"


class UploadCoordinator:
    """Issues presigned upload targets."""

    def __init__(
        self,
        storage: ObjectStorage,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        expiry_seconds: int = UPLOAD_URL_EXPIRY_SECONDS,
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._key_prefix = key_prefix
        self._expiry_seconds = expiry_seconds
        self._timeout = timeout_seconds
        self._clock = clock

    async def issue_upload_target(
        self,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> UploadTarget:
        if not filename or not filename.strip():
            raise ValidationError("filename", "is required")
        if not content_type or not content_type.strip():
            raise ValidationError("contentType", "is required")

        storage_key = build_storage_key(
            filename.strip(),
            prefix=self._key_prefix,
            now_millis=int(self._clock() * 1000),
        )

        upload_url = await call_upstream(
            "presign_upload",
            self._storage.presign_upload(
                storage_key,
                content_type.strip(),
                self._expiry_seconds,
            ),
            self._timeout,
        )

        logger.info(
            "Issued upload target",
            extra={
                "storage_key": storage_key,
                "content_type": content_type,
                "expires_in": self._expiry_seconds,
            }
        )

        return UploadTarget(
            upload_url=upload_url,
            storage_key=storage_key,
            expires_in=self._expiry_seconds,
        )
