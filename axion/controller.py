"""
Base class for application controllers.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from axion.http import Response, html_response, json_response

Renderer = Callable[[str, Mapping[str, Any]], str]


class Controller:
    """
    Response helpers for controller actions.

    `renderer` turns a view name plus data into HTML; the host framework
    supplies it (Axion ships no template engine).
    """

    renderer: Optional[Renderer] = None

    def __init__(self, renderer: Optional[Renderer] = None) -> None:
        if renderer is not None:
            self.renderer = renderer

    def json_response(self, data: Any, status: int = 200) -> Response:
        return json_response(data, status)

    def html_response(self, view: str, data: Optional[Mapping[str, Any]] = None, status: int = 200) -> Response:
        if self.renderer is None:
            raise RuntimeError(f"{type(self).__name__} has no renderer for view {view!r}")
        return html_response(self.renderer(view, dict(data or {})), status)


__all__ = ["Controller", "Renderer"]
