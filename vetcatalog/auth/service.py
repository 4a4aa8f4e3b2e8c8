from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models import ROLE_VETERINARIAN, ROLES, User
from ..security import hash_password, verify_password

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class EmailTakenError(Exception):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_role(role: Optional[str]) -> str:
    if not role:
        return ROLE_VETERINARIAN
    if role not in ROLES:
        raise ValueError(
            f"Invalid role. Role must be one of: {', '.join(ROLES)}."
        )
    return role


def register_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    phone_number: str,
    role: Optional[str] = None,
) -> User:
    role = validate_role(role)
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

    email = normalize_email(email)
    if session.exec(select(User).where(User.email == email)).first():
        raise EmailTakenError(email)

    user = User(
        name=name.strip(),
        email=email,
        phone_number=phone_number.strip(),
        password_hash=hash_password(password),
        role=role,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        # concurrent registration raced past the lookup above
        session.rollback()
        raise EmailTakenError(email) from exc
    session.refresh(user)
    logger.info("Registered %s user id=%s", user.role, user.id)
    return user


def authenticate(session: Session, email: str, password: str) -> Optional[User]:
    user = session.exec(
        select(User).where(User.email == normalize_email(email))
    ).first()
    if user and verify_password(password, user.password_hash):
        return user
    return None


def list_users(session: Session) -> List[User]:
    return list(session.exec(select(User).order_by(User.id)))
