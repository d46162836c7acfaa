"""Tests for user registration, sign-in and account settings."""

from __future__ import annotations

import pytest

from conftest import TEST_PASSWORD
from dhanmantri.services import auth


def test_create_user_hashes_password_and_normalizes_email(session_factory):
    user = auth.create_user(
        email="  Priya@Example.COM ",
        username="priya",
        password="hunter22",
        session_factory=session_factory,
    )
    assert user.email == "priya@example.com"
    assert user.password_hash != "hunter22"
    assert user.password_hash.startswith("$argon2")


@pytest.mark.parametrize(
    "email, username, password, message",
    [
        ("", "name", "pw", "required"),
        ("a@b.com", "", "pw", "required"),
        ("not-an-email", "name", "pw", "valid email"),
    ],
)
def test_create_user_validation(session_factory, email, username, password, message):
    with pytest.raises(ValueError, match=message):
        auth.create_user(
            email=email, username=username, password=password, session_factory=session_factory
        )


def test_create_user_rejects_duplicates(user, session_factory):
    with pytest.raises(ValueError, match="email already exists"):
        auth.create_user(
            email="TESTER@example.com", username="fresh", password="x", session_factory=session_factory
        )
    with pytest.raises(ValueError, match="Username already exists"):
        auth.create_user(
            email="fresh@example.com", username="tester", password="x", session_factory=session_factory
        )


def test_authenticate(user, session_factory):
    signed_in = auth.authenticate(
        email="tester@example.com", password=TEST_PASSWORD, session_factory=session_factory
    )
    assert signed_in.id == user.id
    assert signed_in.last_login is not None

    assert auth.authenticate(
        email="tester@example.com", password="wrong", session_factory=session_factory
    ) is None
    assert auth.authenticate(
        email="nobody@example.com", password=TEST_PASSWORD, session_factory=session_factory
    ) is None


def test_update_username(user, other_user, session_factory):
    renamed = auth.update_username(user_id=user.id, username="  newname ", session_factory=session_factory)
    assert renamed.username == "newname"

    with pytest.raises(ValueError, match="already exists"):
        auth.update_username(user_id=user.id, username="other", session_factory=session_factory)
    with pytest.raises(ValueError, match="cannot be empty"):
        auth.update_username(user_id=user.id, username=" ", session_factory=session_factory)


def test_update_password(user, session_factory):
    with pytest.raises(ValueError, match="New passwords do not match!"):
        auth.update_password(
            user_id=user.id,
            new_password="first-pass",
            confirm_password="second-pass",
            session_factory=session_factory,
        )

    auth.update_password(
        user_id=user.id,
        new_password="brand-new",
        confirm_password="brand-new",
        session_factory=session_factory,
    )
    assert auth.authenticate(
        email=user.email, password="brand-new", session_factory=session_factory
    ) is not None
    assert auth.authenticate(
        email=user.email, password=TEST_PASSWORD, session_factory=session_factory
    ) is None
