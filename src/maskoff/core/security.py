"""Bearer token helpers for the identity the chat core consumes.

Tokens are issued by the external identity subsystem; this module only needs
to mint them for tooling and tests and to verify them on every request and
push channel.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from maskoff.core.settings import settings


class InvalidTokenError(ValueError):
    """Raised when a bearer token cannot be verified."""


def create_access_token(subject_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT whose ``sub`` claim is the subject id.

    Args:
        subject_id: Opaque subject identifier
        expires_delta: Optional lifetime override

    Returns:
        Encoded JWT string
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": subject_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_subject(token: str) -> str:
    """Verify a JWT and return its subject id.

    Raises:
        InvalidTokenError: If the token is malformed, expired or has no subject
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise InvalidTokenError("Could not validate credentials") from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError("Could not validate credentials")
    return subject
