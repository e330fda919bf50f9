"""
Redis-based rate limiting middleware.
Implements distributed rate limiting with a sliding window algorithm.

Document uploads (resumes, letters of acceptance) get their own, tighter
per-user budget on top of the general per-user and per-IP limits.
"""

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import redis.asyncio as redis
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class RateLimitStrategy(str, Enum):
    """Rate limiting strategy types."""
    IP_ADDRESS = "ip"
    USER_ID = "user"


class RateLimitWindow(str, Enum):
    """Time window types for rate limiting."""
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"


WINDOW_SECONDS = {
    RateLimitWindow.SECOND: 1,
    RateLimitWindow.MINUTE: 60,
    RateLimitWindow.HOUR: 3600,
    RateLimitWindow.DAY: 86400,
}


@dataclass
class RateLimitRule:
    """Rate limit rule configuration."""
    strategy: RateLimitStrategy
    window: RateLimitWindow
    max_requests: int
    paths: Optional[List[str]] = None  # Path prefixes or suffixes the rule applies to
    methods: Optional[List[str]] = None  # Specific HTTP methods
    exempt_user_ids: Optional[List[str]] = None

    def matches(self, path: str, method: str) -> bool:
        if self.paths and not any(
            path.startswith(p) or path.endswith(p) for p in self.paths
        ):
            return False
        if self.methods and method not in self.methods:
            return False
        return True


class SlidingWindowRateLimiter:
    """
    Redis-based sliding window rate limiter.

    Each key is a sorted set of request timestamps; entries older than the
    window are trimmed on every check.
    """

    def __init__(self, redis_client: Redis):
        """
        Initialize rate limiter.

        Args:
            redis_client: Async Redis client instance
        """
        self.redis = redis_client

    async def is_allowed(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
        cost: int = 1,
    ) -> tuple[bool, Dict[str, Any]]:
        """
        Check if request is allowed under rate limit.

        Args:
            key: Unique identifier for the rate limit
            max_requests: Maximum requests allowed in window
            window_seconds: Time window in seconds
            cost: Cost of this request

        Returns:
            Tuple of (is_allowed, metadata)
            metadata contains: limit, remaining, reset, retry_after
        """
        now = time.time()
        window_start = now - window_seconds
        member = f"{now}:{uuid.uuid4().hex[:8]}"

        try:
            pipe = self.redis.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zadd(key, {member: now})
            pipe.expire(key, window_seconds + 60)
            results = await pipe.execute()

            # Count before this request was added
            current_count = results[1]
            is_allowed = (current_count + cost) <= max_requests
            remaining = max(0, max_requests - current_count - cost)

            if is_allowed:
                retry_after = 0
            else:
                oldest = await self.redis.zrange(key, 0, 0, withscores=True)
                if oldest:
                    retry_after = int(oldest[0][1] + window_seconds - now)
                else:
                    retry_after = window_seconds
                # Rejected requests do not consume budget
                await self.redis.zrem(key, member)

            return is_allowed, {
                'limit': max_requests,
                'remaining': remaining,
                'reset': int(now + window_seconds),
                'retry_after': max(0, retry_after),
                'current': current_count,
            }

        except (RedisConnectionError, RedisError) as e:
            # Fail open - allow request if Redis is unavailable
            logger.error(f"Redis error in rate limiter: {e}")
            return True, {
                'limit': max_requests,
                'remaining': max_requests,
                'reset': int(now + window_seconds),
                'retry_after': 0,
                'error': 'redis_unavailable',
            }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware.

    Features:
    - Per-IP and per-user strategies, optionally scoped to paths
    - Sliding window algorithm backed by Redis
    - Fails open if Redis is unavailable
    - X-RateLimit-* headers on every response
    """

    def __init__(
        self,
        app: ASGIApp,
        redis_url: str,
        rules: Optional[List[RateLimitRule]] = None,
        key_prefix: str = "ratelimit",
        enable_headers: bool = True,
        limiter: Optional[SlidingWindowRateLimiter] = None,
    ):
        """
        Initialize rate limiting middleware.

        Args:
            app: The ASGI application
            redis_url: Redis connection URL
            rules: List of rate limit rules to apply
            key_prefix: Prefix for Redis keys
            enable_headers: Whether to add rate limit headers to responses
            limiter: Pre-built limiter (skips lazy Redis connection)
        """
        super().__init__(app)
        self.redis_url = redis_url
        self.redis_client: Optional[Redis] = None
        self.limiter = limiter
        self.rules = rules or default_rules()
        self.key_prefix = key_prefix
        self.enable_headers = enable_headers
        self._initialized = limiter is not None

    async def _initialize(self):
        """Initialize Redis connection lazily."""
        self._initialized = True
        try:
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                health_check_interval=30,
            )
            self.limiter = SlidingWindowRateLimiter(self.redis_client)
            logger.info("Rate limiter initialized successfully")
        except (RedisError, ValueError) as e:
            # Continue without rate limiting (fail open)
            logger.error(f"Failed to initialize rate limiter: {e}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._initialized:
            await self._initialize()

        if not self.limiter or request.url.path in ['/health', '/ready']:
            return await call_next(request)

        result = await self._check_rate_limits(request)

        if not result['allowed']:
            logger.warning(
                f"Rate limit exceeded: {request.method} {request.url.path} "
                f"(user={self._get_user_id(request)})"
            )
            response = JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'status': 'error',
                    'code': 'RATE_LIMIT_EXCEEDED',
                    'message': 'Too many requests. Please try again later.',
                    'retry_after': result['retry_after'],
                },
            )
            if self.enable_headers:
                self._add_rate_limit_headers(response, result)
            return response

        response = await call_next(request)

        if self.enable_headers:
            self._add_rate_limit_headers(response, result)

        return response

    async def _check_rate_limits(self, request: Request) -> Dict[str, Any]:
        """
        Check all applicable rate limits; the most restrictive one wins.

        Args:
            request: The incoming request

        Returns:
            Dictionary with rate limit check results
        """
        results = {
            'allowed': True,
            'limit': 0,
            'remaining': None,
            'reset': 0,
            'retry_after': 0,
        }

        for rule in self.rules:
            if not rule.matches(request.url.path, request.method):
                continue

            user_id = self._get_user_id(request)
            if rule.exempt_user_ids and user_id in rule.exempt_user_ids:
                continue

            key = self._generate_key(request, rule)
            allowed, metadata = await self.limiter.is_allowed(
                key=key,
                max_requests=rule.max_requests,
                window_seconds=WINDOW_SECONDS[rule.window],
            )

            if not allowed:
                results['allowed'] = False
                results['retry_after'] = max(results['retry_after'], metadata['retry_after'])

            if results['remaining'] is None or metadata['remaining'] < results['remaining']:
                results['limit'] = metadata['limit']
                results['remaining'] = metadata['remaining']
                results['reset'] = metadata['reset']

        return results

    def _generate_key(self, request: Request, rule: RateLimitRule) -> str:
        """
        Generate rate limit key based on strategy.

        Args:
            request: The incoming request
            rule: The rate limit rule

        Returns:
            Rate limit key
        """
        parts = [self.key_prefix, rule.strategy.value, rule.window.value]

        if rule.strategy == RateLimitStrategy.IP_ADDRESS:
            parts.append(self._get_client_ip(request))

        elif rule.strategy == RateLimitStrategy.USER_ID:
            user_id = self._get_user_id(request)
            # Fall back to IP if user not authenticated
            parts.append(user_id or f"ip:{self._get_client_ip(request)}")

        if rule.paths:
            # Separate budget per path-scoped rule
            parts.append(hashlib.md5(",".join(rule.paths).encode()).hexdigest()[:8])

        return ":".join(parts)

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get('x-forwarded-for')
        if forwarded_for:
            return forwarded_for.split(',')[0].strip()

        real_ip = request.headers.get('x-real-ip')
        if real_ip:
            return real_ip

        return request.client.host if request.client else 'unknown'

    def _get_user_id(self, request: Request) -> Optional[str]:
        """User id placed in request state by the authentication middleware."""
        user_id = getattr(request.state, 'user_id', None)
        return str(user_id) if user_id is not None else None

    def _add_rate_limit_headers(self, response: Response, result: Dict[str, Any]):
        if result['remaining'] is None:
            # No rule applied to this request
            return

        response.headers['X-RateLimit-Limit'] = str(result['limit'])
        response.headers['X-RateLimit-Remaining'] = str(result['remaining'])
        response.headers['X-RateLimit-Reset'] = str(result['reset'])

        if not result['allowed']:
            response.headers['Retry-After'] = str(result['retry_after'])

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            logger.info("Rate limiter closed")


def default_rules(
    per_second: int = 10,
    per_minute: int = 100,
    per_hour: int = 1000,
    uploads_per_minute: int = 20,
) -> List[RateLimitRule]:
    """Default rule set for the hiring API."""
    return [
        # Document uploads
        RateLimitRule(
            strategy=RateLimitStrategy.USER_ID,
            window=RateLimitWindow.MINUTE,
            max_requests=uploads_per_minute,
            paths=['/upload-resume', '/loa/upload', '/loa/upload-signed'],
            methods=['POST'],
        ),
        RateLimitRule(
            strategy=RateLimitStrategy.USER_ID,
            window=RateLimitWindow.SECOND,
            max_requests=per_second,
        ),
        RateLimitRule(
            strategy=RateLimitStrategy.USER_ID,
            window=RateLimitWindow.MINUTE,
            max_requests=per_minute,
        ),
        RateLimitRule(
            strategy=RateLimitStrategy.USER_ID,
            window=RateLimitWindow.HOUR,
            max_requests=per_hour,
        ),
        # Backup for unauthenticated traffic
        RateLimitRule(
            strategy=RateLimitStrategy.IP_ADDRESS,
            window=RateLimitWindow.MINUTE,
            max_requests=per_minute,
        ),
    ]
