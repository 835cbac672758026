"""Middleware package for the back office."""

from backoffice.app.middleware.auth import AdminAuthenticator, require_admin
from backoffice.app.middleware.rate_limit import FixedWindowRateLimiter
from backoffice.app.middleware.request_id import RequestIdMiddleware, get_request_id
from backoffice.app.middleware.request_size import RequestSizeLimitMiddleware
from backoffice.app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "AdminAuthenticator",
    "require_admin",
    "FixedWindowRateLimiter",
    "RequestIdMiddleware",
    "get_request_id",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
