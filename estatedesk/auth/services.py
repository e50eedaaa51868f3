"""Account registration, sign-in and session helpers."""
from __future__ import annotations

import re
from functools import wraps
from typing import Callable, Optional

from flask import g, jsonify
from flask_login import current_user, login_required  # noqa: F401
from flask_login import login_user as _login_user
from flask_login import logout_user as _logout_user
from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db, login_manager
from .models import User

MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthenticationError(ValueError):
    """Raised when credentials or account details are rejected."""


def normalize_email(value: str | None) -> str:
    """Return a comparable representation of an email address."""

    return (value or "").strip().lower()


def validate_password(password: str | None) -> str:
    """Ensure a new password meets the minimum length."""

    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthenticationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    return password


def find_user_by_email(email: str | None) -> Optional[User]:
    """Return the account registered under ``email``, if any."""

    normalized = normalize_email(email)
    if not normalized:
        return None
    return User.query.filter_by(email=normalized).first()


def register_user(email: str, password: str, display_name: str = "") -> User:
    """Create a new account with a hashed password."""

    normalized = normalize_email(email)
    if not EMAIL_PATTERN.match(normalized):
        raise AuthenticationError("Please enter a valid email address.")
    validate_password(password)
    if find_user_by_email(normalized):
        raise AuthenticationError("An account with this email already exists.")

    user = User(
        email=normalized,
        password_hash=generate_password_hash(password),
        display_name=(display_name or "").strip(),
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User:
    """Return the user matching the credentials or raise ``AuthenticationError``."""

    if not EMAIL_PATTERN.match(normalize_email(email)):
        raise AuthenticationError("Please enter a valid email address.")
    if not password:
        raise AuthenticationError("Password is required.")

    user = find_user_by_email(email)
    if user is None or not check_password_hash(user.password_hash, password):
        raise AuthenticationError("Invalid email or password.")
    return user


def verify_password(user: User, password: str | None) -> bool:
    return bool(password) and check_password_hash(user.password_hash, password)


def set_password(user: User, password: str) -> None:
    """Hash and store a new password for ``user``."""

    validate_password(password)
    user.password_hash = generate_password_hash(password)
    db.session.add(user)


@login_manager.user_loader
def load_user(user_id: str) -> Optional[User]:
    return db.session.get(User, int(user_id))


def login_user(user: User) -> None:
    """Bind ``user`` to the current session."""

    _login_user(user)
    g.user = user


def logout_user() -> None:
    _logout_user()
    g.user = None


def load_current_user() -> None:
    """Expose the signed-in user as ``g.user`` for templates and logging."""

    g.user = current_user._get_current_object() if current_user.is_authenticated else None


def get_current_user() -> Optional[User]:
    return g.get("user")


def api_login_required(view: Callable) -> Callable:
    """Reject anonymous JSON requests with HTTP 401."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        if get_current_user() is None:
            response = jsonify({"success": False, "message": "Sign in to continue."})
            response.status_code = 401
            return response
        return view(*args, **kwargs)

    return wrapped
