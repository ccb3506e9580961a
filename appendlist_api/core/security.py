"""Session token utilities.

Sign-in happens upstream (Google OAuth); this service only receives the
resulting session cookie and trusts the principal it carries.
"""

from datetime import datetime, timedelta, timezone

import jwt

from appendlist_api.core.config import settings
from appendlist_api.schemas.auth import Principal, TokenPayload


SESSION_ALGORITHM = "HS256"


def create_session_token(
    user_id: str,
    email: str | None = None,
    name: str | None = None,
) -> str:
    """
    Sign a session JWT for a verified principal.

    Email and name are stored exactly as the identity provider reported them;
    services normalize at the point of use.
    """
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=SESSION_ALGORITHM)


def decode_session_token(token: str) -> dict:
    """
    Verify a session JWT against the current secret, then the previous one.

    Raises:
        jwt.InvalidTokenError: signature or expiry invalid under every secret
    """
    errors: list[jwt.InvalidTokenError] = []
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=[SESSION_ALGORITHM])
        except jwt.InvalidTokenError as exc:
            errors.append(exc)
    raise errors[-1]


def principal_from_token(token: str) -> Principal:
    """
    Decode a session cookie value into the caller's identity.

    Raises:
        jwt.InvalidTokenError: bad signature or expired token
        pydantic.ValidationError: claims missing ``sub``
    """
    payload = TokenPayload(**decode_session_token(token))
    return Principal(id=payload.sub, email=payload.email, name=payload.name)
