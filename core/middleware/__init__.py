"""
Core middleware package.

This package provides the HTTP-facing infrastructure:
- Error handling with sensitive data sanitization
- Structured logging with PII masking and correlation ids
- Redis-based sliding window rate limiting
- JWT authentication
- Role permissions and the hiring-manager rule
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    StructuredFormatter,
    setup_logging,
)

from core.middleware.rate_limiting import (
    RateLimitMiddleware,
    RateLimitRule,
    RateLimitStrategy,
    RateLimitWindow,
    SlidingWindowRateLimiter,
    default_rules,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    AuthenticationError,
    CurrentUser,
    authenticate_request,
)

from core.middleware.authorization import (
    Permission,
    ROLE_PERMISSIONS,
    check_permission,
    get_user_permissions,
    require_permission,
    is_staff,
    is_hiring_manager,
    ensure_hiring_manager,
    can_view_request,
    ensure_can_view,
    AuthorizationError,
    InsufficientPermissions,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "StructuredFormatter",
    "setup_logging",
    # Rate limiting
    "RateLimitMiddleware",
    "RateLimitRule",
    "RateLimitStrategy",
    "RateLimitWindow",
    "SlidingWindowRateLimiter",
    "default_rules",
    # Authentication
    "AuthenticationMiddleware",
    "AuthenticationError",
    "CurrentUser",
    "authenticate_request",
    # Authorization
    "Permission",
    "ROLE_PERMISSIONS",
    "check_permission",
    "get_user_permissions",
    "require_permission",
    "is_staff",
    "is_hiring_manager",
    "ensure_hiring_manager",
    "can_view_request",
    "ensure_can_view",
    "AuthorizationError",
    "InsufficientPermissions",
]
