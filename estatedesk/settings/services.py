"""Helpers for display timezone, profile and account management."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import g, has_request_context

from ..auth.models import DEFAULT_TIMEZONE, User
from ..auth.services import AuthenticationError, set_password, verify_password
from ..extensions import db
from ..models import SystemLog

AVAILABLE_TIMEZONES: tuple[tuple[str, str], ...] = (
    ("Asia/Kolkata", "India Standard Time"),
    ("UTC", "Coordinated Universal Time"),
    ("Asia/Dubai", "Gulf Standard Time"),
    ("Asia/Singapore", "Singapore Time"),
    ("Europe/London", "Greenwich Mean Time"),
    ("America/New_York", "Eastern Time — US & Canada"),
    ("America/Los_Angeles", "Pacific Time — US & Canada"),
    ("Australia/Sydney", "Australian Eastern Time"),
)
MAX_PHONE_LENGTH = 20

_timezone_cache: dict[str, ZoneInfo] = {}


class ProfileValidationError(ValueError):
    """Raised when profile or password changes are rejected."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


@dataclass(frozen=True)
class TimezoneOption:
    """Simple representation of a selectable timezone."""

    value: str
    label: str
    offset: str

    @property
    def display_label(self) -> str:
        return f"{self.label} ({self.offset})"


def _resolve_zoneinfo(name: str) -> ZoneInfo:
    zone = _timezone_cache.get(name)
    if zone:
        return zone
    try:
        zone = ZoneInfo(name)
    except ZoneInfoNotFoundError:
        zone = ZoneInfo("UTC")
    _timezone_cache[name] = zone
    return zone


def _request_user() -> Optional[User]:
    if not has_request_context():
        return None
    return g.get("user")


def timezone_name_for(user: Optional[User] = None) -> str:
    """Return the display timezone of ``user`` (default: the signed-in user)."""

    user = user or _request_user()
    if user is None or not user.timezone:
        return DEFAULT_TIMEZONE
    return user.timezone


def get_active_timezone(user: Optional[User] = None) -> ZoneInfo:
    return _resolve_zoneinfo(timezone_name_for(user))


def set_timezone(user: User, choice: str) -> User:
    """Persist a new timezone selection from the curated list."""

    if choice not in {value for value, _ in AVAILABLE_TIMEZONES}:
        raise ValueError("Select a timezone from the list before saving.")
    user.timezone = choice
    db.session.add(user)
    db.session.commit()
    return user


def _format_offset(delta: timedelta | None) -> str:
    if delta is None:
        return "UTC±00:00"
    minutes = int(delta.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    hours, remainder = divmod(abs(minutes), 60)
    return f"UTC{sign}{hours:02d}:{remainder:02d}"


def _offset_for(name: str) -> str:
    now_utc = datetime.now(timezone.utc)
    return _format_offset(now_utc.astimezone(_resolve_zoneinfo(name)).utcoffset())


def get_timezone_options() -> list[TimezoneOption]:
    return [
        TimezoneOption(value=value, label=label, offset=_offset_for(value))
        for value, label in AVAILABLE_TIMEZONES
    ]


def describe_timezone(name: str | None) -> str:
    """Return a friendly label for the selected timezone."""

    name = name or DEFAULT_TIMEZONE
    label = dict(AVAILABLE_TIMEZONES).get(name, name)
    return f"{label} ({_offset_for(name)})"


def convert_to_active_timezone(value: datetime, user: Optional[User] = None) -> datetime:
    """Convert a naive UTC datetime to the user's display timezone."""

    if not isinstance(value, datetime):
        raise TypeError("Datetime objects are required for timezone conversion")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(get_active_timezone(user))


def current_date(user: Optional[User] = None) -> date:
    """Return today's date in the user's display timezone."""

    return datetime.now(get_active_timezone(user)).date()


def update_profile(user: User, data: Mapping[str, Any]) -> User:
    """Save display name and contact numbers for ``user``."""

    errors: dict[str, str] = {}
    display_name = str(data.get("display_name") or "").strip()
    if not display_name:
        errors["display_name"] = "Display name is required."

    numbers: dict[str, str | None] = {}
    for key in ("primary_number", "secondary_number"):
        value = str(data.get(key) or "").strip()
        if len(value) > MAX_PHONE_LENGTH:
            errors[key] = f"Phone numbers can be at most {MAX_PHONE_LENGTH} characters."
        numbers[key] = value or None

    if errors:
        raise ProfileValidationError(errors)

    user.display_name = display_name
    user.primary_number = numbers["primary_number"]
    user.secondary_number = numbers["secondary_number"]
    db.session.add(user)
    db.session.commit()
    return user


def change_password(
    user: User, current_password: str, new_password: str, confirm_password: str
) -> User:
    """Replace the password after re-checking the current one."""

    if not verify_password(user, current_password):
        raise ProfileValidationError(
            {"current_password": "Failed to change password. Please check your current password."}
        )
    if new_password != confirm_password:
        raise ProfileValidationError({"confirm_password": "Passwords do not match."})
    try:
        set_password(user, new_password)
    except AuthenticationError as exc:
        raise ProfileValidationError({"new_password": str(exc)}) from exc
    db.session.commit()
    return user


def delete_account(user: User, confirm_email: str | None) -> None:
    """Remove the user along with every property, prospect, media file and log entry.

    ``confirm_email`` must repeat the account's own address.
    """

    if (confirm_email or "").strip().lower() != user.email:
        raise ProfileValidationError(
            {"confirm_email": "Type your email address exactly to confirm deletion."}
        )
    SystemLog.query.filter_by(user_id=user.id).delete(synchronize_session=False)
    db.session.delete(user)
    db.session.commit()
