"""Staff bearer tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import settings
from app.schemas.appointments import Actor

TOKEN_TYPE = "access"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed access token.

    Args:
        data: Claims to encode; staff tokens carry ``sub``, ``name`` and ``role``
        expires_delta: Lifetime, ACCESS_TOKEN_EXPIRE_MINUTES when omitted

    Returns:
        Encoded JWT
    """
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = {**data, "exp": issued_at + lifetime, "iat": issued_at, "type": TOKEN_TYPE}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_staff_token(actor: Actor, expires_delta: timedelta | None = None) -> str:
    """Access token whose claims rebuild ``actor`` on the way back in."""
    return create_access_token(
        {"sub": actor.uid, "name": actor.name, "role": actor.role.value},
        expires_delta=expires_delta,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Verified claims of an access token, or None if it is invalid, expired or of another type."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None
    return payload
