"""Database models for candidate deals."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint

from ..extensions import db

PROSPECT_NEW = "New"
PROSPECT_CONVERTED = "Converted"
PROSPECT_STATUSES: tuple[str, ...] = (PROSPECT_NEW, PROSPECT_CONVERTED)
ACTIVE_PROSPECT_STATUSES: tuple[str, ...] = (PROSPECT_NEW,)


class Prospect(db.Model):
    """A potential deal that has not yet become a property."""

    __table_args__ = (
        CheckConstraint("status IN ('New', 'Converted')", name="ck_prospect_status"),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    owner_id: int = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    deal_name: str = db.Column(db.String(160), nullable=False)
    source: str = db.Column(db.String(160), nullable=False)
    estimated_value: Decimal = db.Column(db.Numeric(16, 2), nullable=False)
    date_added: date = db.Column(db.Date, nullable=False)
    status: str = db.Column(db.String(16), nullable=False, default=PROSPECT_NEW, index=True)
    converted_property_id: Optional[int] = db.Column(
        db.Integer, db.ForeignKey("property.id", ondelete="SET NULL")
    )
    created_at: datetime = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at: datetime = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # deleting the property nulls converted_property_id
    converted_property = db.relationship(
        "Property",
        foreign_keys=[converted_property_id],
        backref=db.backref("source_prospects", passive_deletes=False),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_PROSPECT_STATUSES

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Prospect {self.id} {self.deal_name!r} {self.status}>"
