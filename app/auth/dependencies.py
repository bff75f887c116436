# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Resolves the signed-in TrackAura user from the Supabase access token sent
# as "Authorization: Bearer <jwt>".
#
# Supports both:
# - ES256/RS256 (Supabase JWT signing keys) via the project's JWKS
# - HS256 (legacy SUPABASE_JWT_SECRET)
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/watchlist")
#   async def list_watchlist(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

JWKS_CACHE_TTL = 3600  # 1 hour
JWT_AUDIENCE = "authenticated"


class JWKSCache:
    """Signing keys published by Supabase Auth, refetched at most hourly."""

    def __init__(self, supabase_url: str, ttl: float = JWKS_CACHE_TTL):
        self.url = f"{supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
        self.ttl = ttl
        self._keys: list[dict[str, Any]] = []
        self._fetched_at: float = 0

    def keys(self) -> list[dict[str, Any]]:
        now = time.time()
        if self._keys and (now - self._fetched_at) < self.ttl:
            return self._keys

        try:
            response = httpx.get(self.url, timeout=10)
            response.raise_for_status()
            self._keys = response.json().get("keys", [])
            self._fetched_at = now
            logger.debug(f"Fetched {len(self._keys)} signing keys from {self.url}")
        except (httpx.HTTPError, ValueError) as e:
            # Stale keys are better than none
            logger.warning(f"Failed to fetch JWKS: {e}")
        return self._keys

    def find(self, kid: str) -> dict[str, Any] | None:
        return next((key for key in self.keys() if key.get("kid") == kid), None)


_jwks = JWKSCache(settings.SUPABASE_URL)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the key that verifies a token.

    Returns:
        Tuple of (key, algorithm)
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = header.get("alg", "HS256")
    kid = header.get("kid")
    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        key = _jwks.find(kid)
        if key is not None:
            return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and extract the user.

    Raises:
        HTTPException: 401 if the token is invalid, expired or lacks a user id
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate the user from the bearer token.

    Returns:
        AuthUser: The authenticated user

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    return decode_access_token(credentials.credentials)
