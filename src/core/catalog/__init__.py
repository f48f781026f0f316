"""
Video catalog workflow.

Upload targets, metadata records, publish state, playback URLs and the
admin gate that protects them.
"""

from .admin import AdminGate
from .errors import (
    CatalogError,
    NotFoundError,
    UnauthorizedError,
    UpstreamUnavailableError,
    ValidationError,
)
from .interfaces import ObjectStorage, VideoStore
from .manager import CatalogManager
from .models import NewVideo, PlaybackEntry, UploadTarget, VideoRecord
from .playback import PlaybackUrlIssuer
from .uploads import UploadCoordinator, build_storage_key, sanitize_filename

__all__ = [
    "AdminGate",
    "CatalogError",
    "CatalogManager",
    "NewVideo",
    "NotFoundError",
    "ObjectStorage",
    "PlaybackEntry",
    "PlaybackUrlIssuer",
    "UnauthorizedError",
    "UploadCoordinator",
    "UploadTarget",
    "UpstreamUnavailableError",
    "ValidationError",
    "VideoRecord",
    "VideoStore",
    "build_storage_key",
    "sanitize_filename",
]
