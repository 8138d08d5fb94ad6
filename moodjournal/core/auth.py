"""
Authentication module for Supabase JWT validation.

Tokens are verified against the project's JWKS (asymmetric keys), fetched
with httpx and cached with a TTL. JWTValidationMiddleware attaches the
result to request.state.user; routes depend on require_auth_from_state.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx
from fastapi import HTTPException, Request, status
from jose import JWTError, jwt
from pydantic import BaseModel

from moodjournal.core.config import get_settings

logger = logging.getLogger(__name__)

TOKEN_ALGORITHMS = ["RS256", "ES256"]  # Supabase signs with RS256 or ES256
TOKEN_AUDIENCE = "authenticated"


class AuthUser(BaseModel):
    """Authenticated user context from JWT token."""

    auth_id: str  # Supabase auth.uid()
    email: str


class AuthOptionalUser(BaseModel):
    """Optional authenticated user (attached to every request by middleware)."""

    auth_id: Optional[str] = None
    email: Optional[str] = None
    is_authenticated: bool = False


class JWKSCache:
    """JWKS keys cached for TTL seconds; concurrent misses share one fetch."""

    TTL: int = 3600

    def __init__(self) -> None:
        self._keys: Optional[dict] = None
        self._fetched_at: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None  # Lazy init to avoid event loop issues

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _is_fresh(self, now: float) -> bool:
        if self._keys is None or self._fetched_at is None:
            return False
        return now - self._fetched_at < self.TTL

    async def get_keys(self) -> dict:
        if self._is_fresh(time.time()):
            assert self._keys is not None
            return self._keys

        async with self._get_lock():
            # Another task may have fetched while we waited
            if self._is_fresh(time.time()):
                assert self._keys is not None
                return self._keys

            self._keys = await self._fetch_keys()
            self._fetched_at = time.time()
            return self._keys

    async def _fetch_keys(self) -> dict:
        """Fetch JWKS from Supabase's well-known endpoint."""
        jwks_url = f"{get_settings().supabase_url}/auth/v1/.well-known/jwks.json"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(jwks_url, timeout=10.0)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Failed to fetch JWKS: {str(e)}",
            )

    def invalidate(self) -> None:
        self._keys = None
        self._fetched_at = None


# Global JWKS cache instance
_jwks_cache = JWKSCache()


async def get_signing_key(token: str) -> dict:
    """
    Get the signing key from JWKS that matches the token's key ID (kid).

    Raises:
        JWTError: If the header is unreadable or no key is available
    """
    jwks = await _jwks_cache.get_keys()
    kid = jwt.get_unverified_header(token).get("kid")

    keys = jwks.get("keys", [])
    for key in keys:
        if key.get("kid") == kid:
            return key

    # Some Supabase projects do not set kid
    if keys:
        return keys[0]

    raise JWTError("No matching signing key found")


async def decode_supabase_token(token: str) -> dict:
    """
    Decode and validate a Supabase JWT.

    Raises:
        JWTError: Invalid signature, audience, expiry or header
    """
    signing_key = await get_signing_key(token)
    return jwt.decode(token, signing_key, algorithms=TOKEN_ALGORITHMS, audience=TOKEN_AUDIENCE)


async def require_auth_from_state(request: Request) -> AuthUser:
    """
    Require authenticated user from request.state (populated by middleware).

    Usage:
        @router.get("/protected")
        async def protected(user: AuthUser = Depends(require_auth_from_state)):
            return {"user_id": user.auth_id}
    """
    user = getattr(request.state, "user", None)

    if user is None or not user.is_authenticated:
        token_error = getattr(request.state, "token_error", None)
        detail = "Authentication required"
        if token_error:
            detail = f"Authentication failed: {token_error}"

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthUser(auth_id=user.auth_id, email=user.email or "")
