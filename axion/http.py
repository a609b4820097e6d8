"""
Minimal HTTP contracts shared by middleware and controllers.

The host framework owns routing, sessions and rendering. Axion only relies on
these shapes:

- a request exposing `method()` and `input(field)`
- a session exposing `get(key)` and `has(key)`
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, NoReturn, Optional, Protocol, runtime_checkable

from axion.errors import AxionError


@runtime_checkable
class Request(Protocol):
    def method(self) -> str:
        ...

    def input(self, field: str) -> Optional[str]:
        ...


@runtime_checkable
class Session(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def has(self, key: str) -> bool:
        ...


Handler = Callable[[Request], Any]


@dataclass
class Response:
    body: str = ""
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400 and "Location" in self.headers


class HttpException(AxionError):
    """Stops request handling with an HTTP status (the host renders it)."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if message else str(status))


def abort(status: int, message: str = "") -> NoReturn:
    raise HttpException(status, message)


def redirect(location: str, status: int = 302) -> Response:
    return Response(status=status, headers={"Location": location})


def json_response(data: Any, status: int = 200) -> Response:
    return Response(
        body=json.dumps(data, default=str),
        status=status,
        headers={"Content-Type": "application/json"},
    )


def html_response(html: str, status: int = 200) -> Response:
    return Response(body=html, status=status, headers={"Content-Type": "text/html; charset=utf-8"})


__all__ = [
    "Handler",
    "HttpException",
    "Request",
    "Response",
    "Session",
    "abort",
    "html_response",
    "json_response",
    "redirect",
]
