# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- limiter: slowapi rate limiter per client.

Exports:
    AuthMiddleware: JWT authentication middleware.
    CurrentUser: Authenticated user attached to the request.
    limiter: Shared slowapi Limiter.
"""

from scholaris.api.middleware.auth import AuthMiddleware, CurrentUser
from scholaris.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "limiter",
    "rate_limit_exceeded_handler",
]
