# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access tokens signed with python-jose.

Claims are sub (user id), role, optional email, exp, iat and a random jti.
Decoding failures surface as TokenExpiredError or InvalidTokenError.

Example:
    >>> from scholaris.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="user-123", role="teacher")
    >>> claims = jwt_manager.decode_token(token)
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError

from scholaris.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Validated access token claims; exp and iat are epoch seconds."""

    sub: str
    role: str
    email: str | None = None
    exp: int
    iat: int
    jti: str


class JWTError(Exception):
    """Token could not be used."""


class TokenExpiredError(JWTError):
    """exp is in the past."""


class InvalidTokenError(JWTError):
    """Bad signature, malformed token or missing claims."""


class JWTManager:
    """Issues and verifies access tokens with the configured key."""

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def create_access_token(
        self,
        user_id: str,
        role: str,
        email: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Sign a token for a user.

        Args:
            user_id: Becomes the sub claim.
            role: Platform role code such as "teacher".
            email: Optional email claim.
            expires_delta: Lifetime override, defaults to the configured
                access token lifetime.

        Returns:
            Encoded compact JWS.
        """
        now = datetime.now(timezone.utc)
        lifetime = expires_delta or timedelta(minutes=self._settings.access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "role": role,
            "email": email,
            "exp": int((now + lifetime).timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Verify the signature and expiry and parse the claims.

        Args:
            token: Encoded token from the Authorization header.

        Returns:
            Parsed claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or lacks claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            logger.warning("Token claims invalid: %s", str(e))
            raise InvalidTokenError("Invalid token: missing claims")
