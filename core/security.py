"""
Token utilities.

Access tokens are HS256 JWTs issued by the help-desk identity service; this
module only signs (for tooling and tests) and verifies them.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, TypedDict

import jwt

from core.config import settings

logger = logging.getLogger(__name__)


class JWTPayload(TypedDict, total=False):
    """Claims carried by an access token."""

    user_id: int
    email: str
    exp: int
    iat: int


def create_access_token(
    user_id: int,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: ID of the user the token is issued to
        email: Optional email claim
        expires_delta: Token lifetime (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)
        extra_claims: Additional claims merged into the payload

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    expires_at = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {
        "user_id": user_id,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    if email:
        payload["email"] = email
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_jwt_token(
    token: str,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Verify a JWT and return its payload.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or the signature is wrong
    """
    payload = jwt.decode(
        token,
        secret or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
        options={"require": ["exp", "user_id"]},
    )
    return JWTPayload(**payload)
