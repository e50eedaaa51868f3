"""Database models for user accounts."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask_login import UserMixin

from ..extensions import db

DEFAULT_TIMEZONE = "Asia/Kolkata"


class User(db.Model, UserMixin):
    """A portfolio owner who signs in to manage properties and prospects."""

    # ids of deleted accounts are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = db.Column(db.Integer, primary_key=True)
    email: str = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(255), nullable=False)
    display_name: str = db.Column(db.String(120), nullable=False, default="")
    primary_number: Optional[str] = db.Column(db.String(32))
    secondary_number: Optional[str] = db.Column(db.String(32))
    timezone: str = db.Column(db.String(64), nullable=False, default=DEFAULT_TIMEZONE)
    created_at: datetime = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at: datetime = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    properties = db.relationship(
        "Property", backref="owner", cascade="all, delete-orphan"
    )
    prospects = db.relationship(
        "Prospect", backref="owner", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
