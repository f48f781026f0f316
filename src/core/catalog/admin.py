"""
Admin gate.

One shared secret, configured at startup and injected here. There are no
sessions, expiries or per-admin identities. Every mutating or
catalog-exposing operation goes through `AdminGate.check`.
"""

import hmac
import logging
from typing import Optional

from .errors import UnauthorizedError

logger = logging.getLogger(__name__)


class AdminGate:
    """Compares a presented secret against the configured one."""

    def __init__(self, secret: str) -> None:
        self._secret = secret.encode("utf-8") if secret else b""

    def check(self, presented: Optional[str]) -> None:
        """
        Raise UnauthorizedError unless `presented` matches the secret.

        An unconfigured gate rejects everything.
        """
        if not self._secret:
            logger.error("Admin request rejected: no admin secret configured")
            raise UnauthorizedError()

        if not presented:
            logger.warning("Admin request missing token")
            raise UnauthorizedError()

        if not hmac.compare_digest(presented.encode("utf-8"), self._secret):
            logger.warning("Invalid admin token attempt")
            raise UnauthorizedError()
