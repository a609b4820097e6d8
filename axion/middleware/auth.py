"""
Session-based access gates.

`Authenticate` lets only logged-in users through (others go to /login);
`RedirectIfAuthenticated` lets only guests through (users go to /dashboard).
A user is logged in when the session has a `user` key.
"""

from __future__ import annotations

from typing import Any, Callable

from axion.http import Handler, Request, Session, redirect
from axion.middleware.csrf import session_from_request

USER_KEY = "user"


class Authenticate:
    def __init__(
        self,
        login_path: str = "/login",
        session_resolver: Callable[[Request], Session] = session_from_request,
    ) -> None:
        self.login_path = login_path
        self.session_resolver = session_resolver

    def __call__(self, request: Request, next_handler: Handler) -> Any:
        if not self.session_resolver(request).has(USER_KEY):
            return redirect(self.login_path)
        return next_handler(request)


class RedirectIfAuthenticated:
    def __init__(
        self,
        home_path: str = "/dashboard",
        session_resolver: Callable[[Request], Session] = session_from_request,
    ) -> None:
        self.home_path = home_path
        self.session_resolver = session_resolver

    def __call__(self, request: Request, next_handler: Handler) -> Any:
        if self.session_resolver(request).has(USER_KEY):
            return redirect(self.home_path)
        return next_handler(request)


__all__ = ["Authenticate", "RedirectIfAuthenticated", "USER_KEY"]
