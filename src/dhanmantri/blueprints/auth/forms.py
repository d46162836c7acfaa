"""Sign-in, sign-up and account settings forms."""

from __future__ import annotations

from dataclasses import dataclass

from ..forms import BaseForm


@dataclass
class LoginForm(BaseForm):
    email: str = ""
    password: str = ""

    _fields = ("email", "password")

    def validate(self) -> bool:
        self.errors.clear()
        self.email = self._required("email", "Email")
        self.password = self.raw_data.get("password", "")
        if not self.password:
            self._add_error("password", "Password is required.")
        return not self.errors


@dataclass
class RegisterForm(BaseForm):
    email: str = ""
    username: str = ""
    password: str = ""

    _fields = ("email", "username", "password")

    def validate(self) -> bool:
        self.errors.clear()
        self.email = self._required("email", "Email")
        self.username = self._required("username", "Username")
        self.password = self.raw_data.get("password", "")
        if not self.password:
            self._add_error("password", "Password is required.")
        elif len(self.password) < 6:
            self._add_error("password", "Password must be at least 6 characters.")
        return not self.errors


@dataclass
class UsernameForm(BaseForm):
    username: str = ""

    _fields = ("username",)

    def validate(self) -> bool:
        self.errors.clear()
        self.username = self._required("username", "Username")
        return not self.errors


@dataclass
class PasswordForm(BaseForm):
    """New password plus its confirmation."""

    new_password: str = ""
    confirm_password: str = ""

    _fields = ("new_password", "confirm_password")

    def validate(self) -> bool:
        self.errors.clear()
        self.new_password = self.raw_data.get("new_password", "")
        self.confirm_password = self.raw_data.get("confirm_password", "")
        if not self.new_password:
            self._add_error("new_password", "Password is required.")
        elif self.new_password != self.confirm_password:
            self._add_error("confirm_password", "New passwords do not match!")
        return not self.errors
