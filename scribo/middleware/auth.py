"""
Bearer token authentication

Access tokens are Supabase JWTs signed with an asymmetric key. The signing
keys come from the project's JWKS endpoint and are cached in-process.
"""
import logging
import time
from typing import Awaitable, Callable, Optional

import httpx
from fastapi import Header, HTTPException
from jose import jwk, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from scribo.config import get_settings
from scribo.features.users.domain import CurrentUser

logger = logging.getLogger(__name__)

ACCEPTED_ALGORITHMS = ["ES256", "RS256"]
TOKEN_AUDIENCE = "authenticated"
JWKS_TTL_SECONDS = 60 * 60


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


class JWKSCache:
    """
    Signing keys of the identity provider.

    Keys are refetched once `ttl` has passed. If a refresh fails the previous
    key set keeps being served; with nothing cached the request fails with 503.
    """

    def __init__(
        self,
        url: str,
        ttl: float = JWKS_TTL_SECONDS,
        fetch: Optional[Callable[[str], Awaitable[dict]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url
        self.ttl = ttl
        self._fetch = fetch or self._fetch_remote
        self._clock = clock
        self._keys: Optional[dict] = None
        self._fetched_at = 0.0

    @staticmethod
    async def _fetch_remote(url: str) -> dict:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

    async def get_keys(self) -> dict:
        now = self._clock()
        if self._keys is not None and now - self._fetched_at < self.ttl:
            return self._keys

        try:
            self._keys = await self._fetch(self.url)
            self._fetched_at = now
            logger.info(f"Loaded signing keys from {self.url}")
        except Exception as e:
            if self._keys is None:
                logger.error(f"Could not load signing keys from {self.url}: {e}")
                raise HTTPException(status_code=503, detail="Failed to fetch authentication keys")
            logger.warning(f"Signing key refresh failed, serving cached keys: {e}")
        return self._keys

    async def find_key(self, kid: str) -> Optional[dict]:
        keys = await self.get_keys()
        return next((key for key in keys.get("keys", []) if key.get("kid") == kid), None)


def decode_access_token(token: str, key_data: dict, issuer: str, audience: str = TOKEN_AUDIENCE) -> dict:
    """Verify signature, expiry, audience and issuer; return the claims"""
    try:
        return jwt.decode(
            token,
            jwk.construct(key_data),
            algorithms=ACCEPTED_ALGORITHMS,
            audience=audience,
            issuer=issuer,
        )
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTClaimsError as e:
        raise _unauthorized(f"Token validation failed: {e}")
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {e}")


def get_user_from_payload(payload: dict) -> CurrentUser:
    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: no user ID")
    app_metadata = payload.get("app_metadata") or {}
    return CurrentUser(
        user_id=user_id,
        email=payload.get("email"),
        role=app_metadata.get("role") or "user",
    )


async def authenticate(token: str, keys: JWKSCache, issuer: str) -> CurrentUser:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError:
        raise _unauthorized("Invalid token: malformed header")
    if not kid:
        raise _unauthorized("Token missing key ID (kid)")

    key_data = await keys.find_key(kid)
    if key_data is None:
        raise _unauthorized(f"Key with ID '{kid}' not found in JWKS")

    return get_user_from_payload(decode_access_token(token, key_data, issuer))


def bearer_token(authorization: Optional[str]) -> str:
    """Token part of an `Authorization: Bearer <token>` header"""
    if not authorization:
        raise _unauthorized("Authorization header missing")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid authorization header format. Expected 'Bearer <token>'")
    return token.strip()


_jwks_cache: Optional[JWKSCache] = None


def _auth_base_url() -> str:
    supabase_url = get_settings().supabase_url
    if not supabase_url:
        logger.error("SUPABASE_URL is not set; cannot verify access tokens")
        raise HTTPException(status_code=500, detail="Authentication is not configured")
    return f"{supabase_url.rstrip('/')}/auth/v1"


def get_jwks_cache() -> JWKSCache:
    global _jwks_cache

    if _jwks_cache is None:
        _jwks_cache = JWKSCache(f"{_auth_base_url()}/.well-known/jwks.json")
    return _jwks_cache


async def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """FastAPI dependency resolving the caller from the bearer token"""
    token = bearer_token(authorization)
    return await authenticate(token, get_jwks_cache(), issuer=_auth_base_url())
