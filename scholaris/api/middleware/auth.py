# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bearer token authentication for the Scholaris API.

AuthMiddleware decodes the access token on every non-public request and
stores the caller on request.state.user. A missing or bad token leaves
the user as None; route dependencies decide whether that is a 401.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from scholaris.core.config import get_settings
from scholaris.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)
from scholaris.models.common import UserRole
from scholaris.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/health/ready",
    "/health/live",
    "/docs",
    "/redoc",
    "/openapi.json",
})


class CurrentUser:
    """The authenticated caller as described by the token claims."""

    def __init__(self, user_id: str, role: str, email: str | None = None) -> None:
        self.id = user_id
        self.role = role
        self.email = email

    @classmethod
    def from_payload(cls, payload: TokenPayload) -> "CurrentUser":
        return cls(user_id=payload.sub, role=payload.role, email=payload.email)

    def has_any_role(self, *roles: str) -> bool:
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_supervisor(self) -> bool:
        return self.role == UserRole.SUPERVISOR_TEACHER.value

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER.value

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    def __repr__(self) -> str:
        return f"CurrentUser(id={self.id!r}, role={self.role!r})"


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        return None
    return token


class AuthMiddleware(BaseHTTPMiddleware):
    """Attach CurrentUser to request.state for valid Bearer tokens.

    Public paths skip decoding entirely. The structlog context is reset
    per request and carries the user id once a token is accepted.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self._jwt_manager = JWTManager(get_settings().jwt)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        request.state.user = None
        clear_context()

        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        token = _bearer_token(request)
        if token is not None:
            try:
                payload = self._jwt_manager.decode_token(token)
            except TokenExpiredError:
                logger.debug("Rejected expired token on %s", request.url.path)
            except InvalidTokenError as e:
                logger.debug("Rejected token on %s: %s", request.url.path, str(e))
            else:
                request.state.user = CurrentUser.from_payload(payload)
                bind_context(user_id=payload.sub, role=payload.role)

        return await call_next(request)


def get_current_user(request: Request) -> CurrentUser | None:
    """Return the caller set by AuthMiddleware, or None when anonymous."""
    return getattr(request.state, "user", None)
