"""FastAPI authentication dependencies."""

from __future__ import annotations

from typing import Any

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.auth.jwt import verify_token
from questlog.auth.service import get_profile_by_id
from questlog.database import get_session
from questlog.db.models import UserProfile

_bearer = HTTPBearer(auto_error=False)


async def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> dict[str, Any]:
    """Verify the bearer token and return its claims. 401 when absent or invalid."""
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_user(
    claims: dict[str, Any] = Depends(get_token_claims),
    db: AsyncSession = Depends(get_session),
) -> UserProfile:
    """
    Resolve the profile for the token's subject.

    A valid session whose profile has not been created yet gets 404 so the
    client can fall back to POST /auth/create-profile.
    """
    profile = await get_profile_by_id(db, claims["sub"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
