"""Signed session tokens. Only `sub` and `role` are trusted; profile data is always re-fetched."""
from dataclasses import dataclass
from datetime import timedelta

import jwt

from app.config import Settings
from app.errors import AuthenticationError
from app.services.clock import utc_now

ALGORITHM = "HS256"
ROLE_VENDOR = "vendor"
ROLE_ADMIN = "admin"


@dataclass
class SessionClaims:
    subject: str
    role: str


def issue_session_token(subject: str, role: str, settings: Settings) -> str:
    now = utc_now()
    payload = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.session_ttl_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=ALGORITHM)


def decode_session_token(token: str, settings: Settings) -> SessionClaims:
    try:
        claims = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Session expired, please log in again") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid session") from e
    role = claims.get("role")
    if role not in (ROLE_VENDOR, ROLE_ADMIN):
        raise AuthenticationError("Invalid session")
    return SessionClaims(subject=str(claims["sub"]), role=role)
