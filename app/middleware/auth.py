"""
Supabase JWT authentication

REST endpoints verify the bearer token locally against the Supabase JWKS.
WebSocket handshakes hand the token to Supabase Auth instead, and then
check that the user has an IndexNow profile.
"""
import time
import logging
from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, Header
from jose import jwt, jwk
from supabase import Client  # type: ignore
import httpx

from app import config
from app.infra.supabase.client import get_supabase_client
from app.infra.supabase.repositories.user_profiles import UserProfileRepository
from app.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

JWKS_TTL_SECONDS = 60 * 60
JWT_AUDIENCE = "authenticated"
JWT_ALGORITHMS = ["ES256", "RS256"]

# kid -> JWK dict, refreshed hourly or when an unknown kid shows up
_signing_keys: Dict[str, Dict[str, Any]] = {}
_signing_keys_loaded_at: float = 0


def _auth_base_url() -> str:
    if not config.SUPABASE_URL:
        raise ValueError("SUPABASE_URL must be set")
    return f"{config.SUPABASE_URL.rstrip('/')}/auth/v1"


async def _refresh_signing_keys() -> None:
    global _signing_keys, _signing_keys_loaded_at

    url = f"{_auth_base_url()}/.well-known/jwks.json"
    logger.info(f"Loading Supabase signing keys from {url}")
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        if _signing_keys:
            logger.warning(f"JWKS refresh failed, keeping {len(_signing_keys)} cached keys: {e}")
            return
        logger.error(f"JWKS fetch failed with no cached keys: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch authentication keys")

    _signing_keys = {k["kid"]: k for k in response.json().get("keys", []) if k.get("kid")}
    _signing_keys_loaded_at = time.time()


async def get_signing_key(kid: str) -> Optional[Dict[str, Any]]:
    """JWK for a key id; reloads the key set once if the id is unknown (key rotation)"""
    stale = time.time() - _signing_keys_loaded_at >= JWKS_TTL_SECONDS
    if stale or kid not in _signing_keys:
        await _refresh_signing_keys()
    return _signing_keys.get(kid)


async def verify_token(token: str) -> dict:
    """
    Verify a Supabase access token (ES256 or RS256) and return its claims.
    Any failure is reported as 401.
    """
    try:
        kid = jwt.get_unverified_header(token).get("kid")
        if not kid:
            raise HTTPException(status_code=401, detail="Token missing key ID (kid)")

        key_data = await get_signing_key(kid)
        if not key_data:
            raise HTTPException(status_code=401, detail=f"Unknown signing key '{kid}'")

        return jwt.decode(
            token,
            jwk.construct(key_data),
            algorithms=JWT_ALGORITHMS,
            audience=JWT_AUDIENCE,
            issuer=_auth_base_url(),
        )
    except HTTPException:
        raise
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except (jwt.JWTClaimsError, jwt.JWTError) as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")
    except Exception:
        logger.error("Unexpected error verifying token", exc_info=True)
        raise HTTPException(status_code=401, detail="Token verification failed")


async def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Dependency: the `sub` of a valid `Authorization: Bearer` token"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header format. Expected 'Bearer <token>'")

    claims = await verify_token(token.strip())
    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token: no user ID")
    return claims["sub"]


async def require_admin(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_supabase_client),
) -> UserProfile:
    """FastAPI dependency: the caller's profile, which must have an admin role"""
    profile = await UserProfileRepository(db).find_by_user_id(user_id)
    if not profile or not profile.is_admin:
        logger.warning(f"Admin access denied for user {user_id}")
        raise HTTPException(status_code=403, detail="Admin access required")
    return profile


async def authenticate_socket(db: Client, token: Optional[str], user_id: Optional[str]) -> Optional[str]:
    """
    Validate a WebSocket handshake.

    The token must resolve (via Supabase Auth) to the claimed user id, and
    that user must have a profile row.

    Returns:
        The user id, or None if the handshake is rejected
    """
    if not token or not user_id:
        logger.warning("WebSocket handshake missing token or userId")
        return None

    try:
        response = db.auth.get_user(token)
    except Exception as e:
        logger.warning(f"WebSocket token rejected by Supabase Auth: {e}")
        return None

    user = getattr(response, "user", None)
    if not user or user.id != user_id:
        logger.warning(f"WebSocket token does not belong to user {user_id}")
        return None

    profile = await UserProfileRepository(db).find_by_user_id(user_id)
    if not profile:
        logger.warning(f"WebSocket user {user_id} has no profile")
        return None

    return user_id
