"""
Authentication middleware for verifying user identity.

This middleware:
1. Validates JWT tokens from Authorization headers
2. Rejects missing, malformed and expired tokens before routing
3. Stores the verified claims in the request scope

Resolving the claims to an active user happens in the
``authenticate_request`` dependency, which runs on the request's database
session.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional
from datetime import datetime, timezone

import jwt
from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AppError
from core.security import verify_jwt_token, JWTPayload
from core.utils.formatting import format_name
from database.engine import get_db
from database.models.users import User, RoleName

logger = logging.getLogger(__name__)

# Public endpoints that don't require authentication
PUBLIC_ENDPOINTS = [
    "/",
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
]


class AuthenticationError(AppError):
    """Base exception for authentication errors."""

    status_code = 401
    code = "UNAUTHENTICATED"


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""

    code = "TOKEN_EXPIRED"


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""

    code = "TOKEN_INVALID"


class UserNotFoundError(AuthenticationError):
    """Raised when user is not found."""

    code = "USER_NOT_FOUND"


class UserInactiveError(AuthenticationError):
    """Raised when user account is inactive."""

    status_code = 403
    code = "USER_INACTIVE"


@dataclass(frozen=True)
class CurrentUser:
    """The acting principal for one request."""

    id: int
    email: str
    first_name: str
    last_name: str
    roles: frozenset[RoleName] = field(default_factory=frozenset)

    @property
    def full_name(self) -> str:
        return format_name(self.first_name, self.last_name)

    def has_role(self, *roles: RoleName) -> bool:
        return any(role in self.roles for role in roles)

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            roles=frozenset(user.role_names),
        )


class AuthenticationMiddleware:
    """
    Authentication middleware that validates bearer tokens.

    Features:
    - JWT token validation
    - Public endpoint allow-list
    - Request context injection (claims and user id)
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)

        # Skip authentication for public endpoints and CORS preflight
        if request.method == "OPTIONS" or self._is_public_endpoint(request.url.path):
            await self.app(scope, receive, send)
            return

        try:
            token = self._extract_token(request)
            if not token:
                raise TokenInvalidError("No authentication token provided")

            try:
                payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
            except jwt.ExpiredSignatureError:
                raise TokenExpiredError("Token has expired")
            except jwt.InvalidTokenError as e:
                raise TokenInvalidError(f"Invalid token: {str(e)}")

        except TokenExpiredError as e:
            await self._send_error_response(
                scope, receive, send,
                status_code=status.HTTP_401_UNAUTHORIZED,
                code=e.code,
                message="Authentication token has expired. Please sign in again.",
            )
            return
        except TokenInvalidError as e:
            logger.warning(f"Invalid token on {request.method} {request.url.path}: {e}")
            await self._send_error_response(
                scope, receive, send,
                status_code=status.HTTP_401_UNAUTHORIZED,
                code=e.code,
                message="Invalid authentication token.",
            )
            return

        # Inject verified claims into request scope
        scope["jwt_payload"] = payload
        scope.setdefault("state", {})["user_id"] = payload["user_id"]

        await self.app(scope, receive, send)

    def _is_public_endpoint(self, path: str) -> bool:
        """
        Check if endpoint is public (no auth required).

        Args:
            path: Request path

        Returns:
            True if endpoint is public
        """
        if path in PUBLIC_ENDPOINTS:
            return True

        # Prefix match for health checks and docs
        public_prefixes = ["/health", "/ready", "/docs", "/redoc", "/openapi"]
        return any(path.startswith(prefix) for prefix in public_prefixes)

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract JWT token from Authorization header.

        Args:
            request: FastAPI request

        Returns:
            JWT token or None
        """
        auth_header = request.headers.get("Authorization")

        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]  # Remove "Bearer " prefix

        return None

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        status_code: int,
        code: str,
        message: str,
    ) -> None:
        """
        Send error response for authentication failures.

        Args:
            send: ASGI send function
            status_code: HTTP status code
            code: Error code
            message: Error message
        """
        response = JSONResponse(
            status_code=status_code,
            content={
                "status": "error",
                "code": code,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

        await response(scope, receive, send)


async def authenticate_request(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Resolve the verified token claims to an active user.

    Raises:
        TokenInvalidError: If the request carries no verified claims
        UserNotFoundError: If the user no longer exists
        UserInactiveError: If the account is deactivated
    """
    cached = request.scope.get("user")
    if isinstance(cached, CurrentUser):
        return cached

    payload: Optional[JWTPayload] = request.scope.get("jwt_payload")
    if not payload or not payload.get("user_id"):
        raise TokenInvalidError("Authentication required")

    user_id = payload["user_id"]
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        logger.error(f"User {user_id} not found for valid token")
        raise UserNotFoundError("User account not found")

    if not user.is_active:
        logger.warning(f"Inactive user {user_id} attempted access")
        raise UserInactiveError("User account is inactive. Please contact support.")

    current_user = CurrentUser.from_user(user)
    request.scope["user"] = current_user
    return current_user
