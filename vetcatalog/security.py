"""
Password hashing (bcrypt) and bearer token signing (PyJWT).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from .models import ROLES, User
from .settings import Settings, get_settings

BCRYPT_ROUNDS = 12


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    email: str
    role: str
    name: Optional[str] = None


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user: User, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "userId": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> TokenPayload:
    settings = settings or get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    user_id = claims.get("userId")
    role = claims.get("role")
    if not isinstance(user_id, int) or role not in ROLES:
        raise InvalidTokenError("token claims are incomplete")
    return TokenPayload(
        user_id=user_id,
        email=claims.get("email") or "",
        role=role,
        name=claims.get("name"),
    )
