"""
Security utilities for authentication and rate limiting.

Provides API key authentication for the capture clients, bcrypt hashing
for the admin password, JWT bearer tokens for the admin-only report
screens, and a per-IP rate limiter for the scan endpoints.
"""

import secrets
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from platelog.core.config import get_settings
from platelog.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_SUBJECT = "admin"


@dataclass
class TokenData:
    """JWT token payload data."""

    username: str
    exp: datetime


@dataclass
class User:
    """Authenticated principal."""

    username: str
    is_admin: bool = False


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against its bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def check_admin_password(password: str, stored_hash: str | None) -> bool:
    """
    Validate an admin login attempt.

    When no admin password has been saved yet, the configured
    ``default_admin_password`` is accepted so a fresh deployment can reach
    the settings screen to set one.

    Args:
        password: Password entered by the user.
        stored_hash: Bcrypt hash from app settings, if any.

    Returns:
        bool: True if the password is accepted.
    """
    if stored_hash:
        return verify_password(password, stored_hash)

    default = get_settings().default_admin_password
    return secrets.compare_digest(password.encode("utf8"), default.encode("utf8"))


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode (``sub`` is required for decoding).
        expires_delta: Optional custom lifetime.

    Returns:
        str: Encoded JWT token.
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def decode_access_token(token: str) -> TokenData | None:
    """
    Decode and validate a JWT access token.

    Returns:
        TokenData: Decoded token data, or None if invalid or expired.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        return None

    username = payload.get("sub")
    exp = payload.get("exp")
    if username is None or exp is None:
        return None

    return TokenData(
        username=username,
        exp=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


async def verify_admin_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    """
    Require a valid admin bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or not an admin token.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin login required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = decode_access_token(credentials.credentials)
    if token_data is None or token_data.username != ADMIN_SUBJECT:
        logger.warning("admin_token_rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return User(username=token_data.username, is_admin=True)


async def verify_api_key(
    api_key: Annotated[str | None, Depends(api_key_header)],
) -> None:
    """
    Verify the X-API-Key header sent by capture clients.

    Raises:
        HTTPException: If API key is missing or invalid.
    """
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
        )

    settings = get_settings()
    if not secrets.compare_digest(api_key, settings.api_key):
        logger.warning("api_key_invalid", reason="key_mismatch")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )


@dataclass
class RateLimiter:
    """
    In-memory sliding window rate limiter.

    Recognition calls hit a paid vision model, so each client IP is
    capped at ``requests_per_window`` calls per ``window_seconds``.
    """

    requests_per_window: int
    window_seconds: int
    _requests: dict[str, list[float]] = field(default_factory=lambda: defaultdict(list))

    def _prune(self, key: str, now: float) -> list[float]:
        window_start = now - self.window_seconds
        recent = [t for t in self._requests[key] if t > window_start]
        self._requests[key] = recent
        return recent

    def is_allowed(self, key: str) -> bool:
        """Record a request for ``key`` and report whether it fits the window."""
        now = time.time()
        recent = self._prune(key, now)

        if len(recent) < self.requests_per_window:
            recent.append(now)
            return True

        return False

    def get_remaining(self, key: str) -> int:
        """Requests still available to ``key`` in the current window."""
        recent = self._prune(key, time.time())
        return max(0, self.requests_per_window - len(recent))


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the process-wide rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        settings = get_settings()
        _rate_limiter = RateLimiter(
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _rate_limiter


async def check_rate_limit(request: Request) -> None:
    """
    Rate limiting dependency for FastAPI routes.

    Each route keeps its own window per client IP, so gate scans do not
    use up the admin login allowance.

    Raises:
        HTTPException: 429 if the client exceeded its window.
    """
    rate_limiter = get_rate_limiter()
    client_ip = request.client.host if request.client else "unknown"
    key = f"{request.method} {request.url.path} {client_ip}"

    if not rate_limiter.is_allowed(key):
        logger.warning("rate_limit_exceeded", client_ip=client_ip, path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
            headers={
                "Retry-After": str(rate_limiter.window_seconds),
                "X-RateLimit-Remaining": "0",
            },
        )
