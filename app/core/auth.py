"""
Keycloak JWT authentication.

Validates Bearer tokens against the Keycloak JWKS endpoint and exposes the
reviewer-role guard used by the bank dashboard routes.
Disabled in development via AUTH_ENABLED=false.
"""
from __future__ import annotations

from typing import Optional

import httpx
import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import Settings, get_settings

logger = structlog.get_logger()
security = HTTPBearer(auto_error=False)

_jwks_cache: Optional[dict] = None


async def _fetch_jwks(keycloak_url: str) -> dict:
    global _jwks_cache
    if _jwks_cache:
        return _jwks_cache
    async with httpx.AsyncClient() as client:
        resp = await client.get(f"{keycloak_url}/protocol/openid-connect/certs")
        resp.raise_for_status()
        _jwks_cache = resp.json()
        return _jwks_cache


def token_roles(payload: dict) -> set[str]:
    """Collect realm roles and top-level roles from a decoded token."""
    roles = set(payload.get("roles", []))
    roles.update(payload.get("realm_access", {}).get("roles", []))
    return roles


def caller_identity(payload: dict) -> str:
    return payload.get("preferred_username") or payload.get("sub", "unknown")


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    FastAPI dependency: extracts and validates the JWT.
    Returns the decoded token payload (claims).
    """
    if not settings.auth_enabled:
        return {"sub": "dev-reviewer", "roles": [settings.reviewer_role]}

    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    token = credentials.credentials
    try:
        jwks = await _fetch_jwks(settings.keycloak_url)
        unverified_header = jwt.get_unverified_header(token)
        key = next(
            (k for k in jwks.get("keys", []) if k["kid"] == unverified_header.get("kid")),
            None,
        )
        if not key:
            raise HTTPException(status_code=401, detail="Invalid token signing key")

        return jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=settings.keycloak_audience,
            issuer=settings.keycloak_url,
        )

    except JWTError as e:
        logger.warning("jwt_validation_failed", error=str(e))
        raise HTTPException(status_code=401, detail=f"Token validation failed: {e}")


async def require_reviewer(
    token: dict = Depends(verify_token),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Only bank reviewers may list, override or request documents."""
    if settings.reviewer_role not in token_roles(token):
        logger.warning("reviewer_role_missing", caller=caller_identity(token))
        raise HTTPException(status_code=403, detail="Reviewer role required")
    return token
