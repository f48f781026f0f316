"""
Error taxonomy for the catalog workflow.

Each error maps to exactly one HTTP status in the API layer. The core raises
these; infrastructure errors are translated into UpstreamUnavailableError
before they leave the core.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for errors the catalog surfaces to callers."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(CatalogError):
    """Missing or malformed input. Raised before any adapter call."""

    status_code = 400
    public_message = "Invalid request"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class UnauthorizedError(CatalogError):
    """Admin secret missing or wrong. Carries no detail."""

    status_code = 401
    public_message = "Unauthorized (admin only)"

    def __init__(self) -> None:
        super().__init__(self.public_message)


class NotFoundError(CatalogError):
    """No video record with the requested id."""

    status_code = 404
    public_message = "Video not found"

    def __init__(self, video_id: str) -> None:
        super().__init__(self.public_message)
        self.video_id = video_id


class UpstreamUnavailableError(CatalogError):
    """
    The metadata store or object storage failed or timed out.

    The message is generic on purpose; the underlying cause is logged
    server-side and kept on `operation` / `__cause__`.
    """

    status_code = 502
    public_message = "Upstream service unavailable. Please retry."

    def __init__(self, operation: str) -> None:
        super().__init__(self.public_message)
        self.operation = operation
