import hmac
from typing import Any, Mapping, Optional, Protocol

from loguru import logger

class AccessGuard(Protocol):

    def authorize(self, request: Any) -> bool:
        ...

class SharedTokenGuard:
    """Allows requests carrying the one shared bearer token.

    ``request`` is anything with a ``headers`` mapping. Token issuance is
    handled elsewhere; this only compares the presented token.
    """

    def __init__(self, token: Optional[str]) -> None:
        self.token = token

    def authorize(self, request: Any) -> bool:

        if not self.token:
            logger.warning("Access denied: no shared token configured")
            return False

        headers: Mapping[str, str] = getattr(request, "headers", None) or {}
        header = headers.get("Authorization") or headers.get("authorization") or ""
        scheme, _, presented = header.partition(" ")
        if scheme.lower() != "bearer" or not presented:
            return False

        return hmac.compare_digest(presented.strip().encode(), self.token.encode())
