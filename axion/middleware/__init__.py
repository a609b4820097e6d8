"""
HTTP middleware for Axion: CSRF verification and auth/guest gating.
"""

from axion.middleware.auth import Authenticate, RedirectIfAuthenticated
from axion.middleware.csrf import VerifyCsrfToken
from axion.middleware.pipeline import Middleware, Pipeline, default_middleware

__all__ = [
    "Authenticate",
    "Middleware",
    "Pipeline",
    "RedirectIfAuthenticated",
    "VerifyCsrfToken",
    "default_middleware",
]
