"""
Guard for calls into the metadata store and object storage.

Every adapter call goes through `call_upstream`, which applies the
per-call timeout and turns any adapter failure into
UpstreamUnavailableError. No retries happen here; callers retry the
whole operation.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from .errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_upstream(operation: str, call: Awaitable[T], timeout: float) -> T:
    """Await an adapter call with a timeout, translating failures."""
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(
            "Upstream call timed out",
            extra={"operation": operation, "timeout_seconds": timeout},
        )
        raise UpstreamUnavailableError(operation) from e
    except Exception as e:
        logger.error(
            "Upstream call failed",
            extra={"operation": operation, "error": str(e)},
            exc_info=e,
        )
        raise UpstreamUnavailableError(operation) from e
