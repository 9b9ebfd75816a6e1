"""Authentication router: profile creation fallback."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.auth.dependencies import get_token_claims
from questlog.auth.schemas import CreateProfileRequest
from questlog.auth.service import create_profile
from questlog.database import get_session
from questlog.users.schemas import profile_response

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/create-profile")
async def create_profile_endpoint(
    body: CreateProfileRequest,
    claims: dict[str, Any] = Depends(get_token_claims),
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Create the caller's profile when the provider-side trigger has not yet done so."""
    metadata = claims.get("user_metadata") or {}
    profile, created = await create_profile(
        db,
        user_id=claims["sub"],
        username=body.username or metadata.get("username"),
        email=body.email or claims.get("email"),
    )
    await db.commit()
    return JSONResponse(
        status_code=201 if created else 200,
        content={"user": profile_response(profile).model_dump(mode="json")},
    )
