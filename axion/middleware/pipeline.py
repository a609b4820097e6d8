"""
Compose middleware around a request handler.

A middleware is any callable `(request, next_handler) -> response`. The first
middleware in the list runs first.
"""

from __future__ import annotations

from functools import reduce
from typing import Any, Callable, List, Sequence

from axion.http import Handler, Request
from axion.middleware.csrf import VerifyCsrfToken

Middleware = Callable[[Request, Handler], Any]


class Pipeline:
    def __init__(self, middleware: Sequence[Middleware] = ()) -> None:
        self.middleware: List[Middleware] = list(middleware)

    def pipe(self, middleware: Middleware) -> "Pipeline":
        self.middleware.append(middleware)
        return self

    def then(self, handler: Handler) -> Handler:
        """Wrap `handler` so each request flows through every middleware."""

        def wrap(inner: Handler, middleware: Middleware) -> Handler:
            return lambda request: middleware(request, inner)

        return reduce(wrap, reversed(self.middleware), handler)

    def handle(self, request: Request, handler: Handler) -> Any:
        return self.then(handler)(request)


def default_middleware() -> List[Middleware]:
    """Middleware every web route gets."""
    return [VerifyCsrfToken()]


__all__ = ["Middleware", "Pipeline", "default_middleware"]
