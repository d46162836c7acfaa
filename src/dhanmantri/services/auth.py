"""Authentication and user management services."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlmodel import select

from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.user import User

logger = get_logger("auth")

_hasher = PasswordHasher()


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user(user_id: int, *, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by primary key."""
    with session_factory() as session:
        user = session.get(User, user_id)
        if user:
            session.expunge(user)
        return user


def get_user_by_email(email: str, *, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by (case-insensitive) email."""
    email = _normalize_email(email)
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user:
            session.expunge(user)
        return user


def create_user(
    *,
    email: str,
    username: str,
    password: str,
    session_factory: SessionFactory,
) -> User:
    """Create a new user with hashed password."""

    email = _normalize_email(email)
    username = (username or "").strip()
    if not email or not username or not password:
        raise ValueError("Email, username and password are required")
    if "@" not in email:
        raise ValueError("Enter a valid email address")
    password_hash = _hasher.hash(password)
    with session_factory() as session:
        if session.exec(select(User).where(User.email == email)).first():
            raise ValueError("An account with this email already exists")
        if session.exec(select(User).where(User.username == username)).first():
            raise ValueError("Username already exists")
        user = User(email=email, username=username, password_hash=password_hash)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


def authenticate(
    *,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    email = _normalize_email(email)
    if not email or not password:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            logger.info("Rejected sign-in", extra={"user_id": user.id})
            return None

        if _hasher.check_needs_rehash(user.password_hash):
            user.password_hash = _hasher.hash(password)
        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def update_username(*, user_id: int, username: str, session_factory: SessionFactory) -> User:
    """Change the display name shown in the header."""

    username = (username or "").strip()
    if not username:
        raise ValueError("Username cannot be empty")
    with session_factory() as session:
        user = session.get(User, user_id)
        if user is None:
            raise ValueError("User not found")
        clash = session.exec(
            select(User).where(User.username == username).where(User.id != user_id)
        ).first()
        if clash:
            raise ValueError("Username already exists")
        user.username = username
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def update_password(
    *,
    user_id: int,
    new_password: str,
    confirm_password: str,
    session_factory: SessionFactory,
) -> User:
    """Replace the user's password once the confirmation matches."""

    if new_password != confirm_password:
        raise ValueError("New passwords do not match!")
    if not new_password:
        raise ValueError("Password cannot be empty")
    password_hash = _hasher.hash(new_password)
    with session_factory() as session:
        user = session.get(User, user_id)
        if user is None:
            raise ValueError("User not found")
        user.password_hash = password_hash
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("Password updated", extra={"user_id": user_id})
    return user
