"""
CSRF verification middleware.

State-changing requests (POST, PUT, PATCH, DELETE) must carry a `_token`
input equal to the `_token` stored in the session. Token issuance belongs to
the host framework.
"""

from __future__ import annotations

import hmac
from typing import Any, Callable, FrozenSet

from axion.http import Handler, Request, Session, abort
from axion.utils.logging import get_logger

log = get_logger(__name__)

TOKEN_FIELD = "_token"
PROTECTED_METHODS: FrozenSet[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})
CSRF_MISMATCH_STATUS = 419


def session_from_request(request: Request) -> Session:
    """Default session resolver: the request's `session` attribute."""
    return getattr(request, "session")


class VerifyCsrfToken:
    def __init__(
        self,
        session_resolver: Callable[[Request], Session] = session_from_request,
        protected_methods: FrozenSet[str] = PROTECTED_METHODS,
    ) -> None:
        self.session_resolver = session_resolver
        self.protected_methods = protected_methods

    def tokens_match(self, request: Request) -> bool:
        token = request.input(TOKEN_FIELD) or ""
        expected = self.session_resolver(request).get(TOKEN_FIELD) or ""
        if not token or not expected:
            return False
        return hmac.compare_digest(str(token).encode(), str(expected).encode())

    def __call__(self, request: Request, next_handler: Handler) -> Any:
        method = request.method().upper()
        if method in self.protected_methods and not self.tokens_match(request):
            log.warning("CSRF token mismatch", extra={"method": method})
            abort(CSRF_MISMATCH_STATUS, "CSRF token mismatch.")
        return next_handler(request)


__all__ = ["CSRF_MISMATCH_STATUS", "PROTECTED_METHODS", "TOKEN_FIELD", "VerifyCsrfToken", "session_from_request"]
