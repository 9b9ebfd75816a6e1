"""
Verification of identity-provider access tokens.

Sessions are issued by an external identity service that signs HS256 JWTs
with a shared secret. The ``sub`` claim is the user's id; ``email`` and
``user_metadata.username`` are carried along for profile creation.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from questlog.config import get_settings


def create_access_token(
    user_id: str,
    email: str | None = None,
    username: str | None = None,
    expires_in: timedelta | None = None,
) -> str:
    """
    Mint an access token shaped like the identity provider's.

    Used by tests and local development; production tokens come from the
    identity service itself.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        "user_metadata": {"username": username} if username else {},
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, for another
            audience, or has no subject.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise jwt.InvalidTokenError(msg)

    return payload
