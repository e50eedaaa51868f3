"""Database models for owned, listed and sold properties."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint

from ..extensions import db

PROPERTY_TYPES: tuple[str, ...] = (
    "Open Land",
    "Flat",
    "Villa",
    "Commercial Complex Unit",
    "Apartment",
)
AREA_UNITS: tuple[str, ...] = ("Square Feet", "Acre")
LAND_TYPES: tuple[str, ...] = ("Agricultural", "Residential", "Commercial", "Tribal")

STATUS_OWNED = "Owned"
STATUS_FOR_SALE = "For Sale"
STATUS_SOLD = "Sold"
PROPERTY_STATUSES: tuple[str, ...] = (STATUS_OWNED, STATUS_FOR_SALE, STATUS_SOLD)


class Property(db.Model):
    """A real-estate asset held, offered or previously sold by its owner."""

    __table_args__ = (
        CheckConstraint(
            "status IN ('Owned', 'For Sale', 'Sold')", name="ck_property_status"
        ),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    owner_id: int = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    name: str = db.Column(db.String(160), nullable=False)

    street: str = db.Column(db.String(255), nullable=False, default="")
    city: str = db.Column(db.String(120), nullable=False, default="")
    state: str = db.Column(db.String(120), nullable=False, default="")
    zip_code: str = db.Column(db.String(12), nullable=False, default="")
    landmark: Optional[str] = db.Column(db.String(255))
    latitude: Optional[float] = db.Column(db.Float)
    longitude: Optional[float] = db.Column(db.Float)

    area: Decimal = db.Column(db.Numeric(14, 4), nullable=False, default=Decimal("0"))
    area_unit: str = db.Column(db.String(32), nullable=False, default="Square Feet")
    khasra_number: Optional[str] = db.Column(db.String(64))
    landbook_number: Optional[str] = db.Column(db.String(64))

    property_type: str = db.Column(db.String(64), nullable=False, default="Open Land")
    land_type: Optional[str] = db.Column(db.String(64))
    is_diverted: Optional[bool] = db.Column(db.Boolean)

    purchase_date: date = db.Column(db.Date, nullable=False)
    price_per_unit: Optional[Decimal] = db.Column(db.Numeric(14, 2))
    purchase_price: Decimal = db.Column(db.Numeric(16, 2), nullable=False, default=Decimal("0.00"))
    remarks: Optional[str] = db.Column(db.Text)

    status: str = db.Column(db.String(16), nullable=False, default=STATUS_OWNED, index=True)
    is_listed_publicly: bool = db.Column(db.Boolean, nullable=False, default=False, index=True)
    listing_price_per_unit: Optional[Decimal] = db.Column(db.Numeric(14, 2))
    listing_price: Optional[Decimal] = db.Column(db.Numeric(16, 2))
    sold_price: Optional[Decimal] = db.Column(db.Numeric(16, 2))
    sold_date: Optional[date] = db.Column(db.Date)

    created_at: datetime = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at: datetime = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    media = db.relationship(
        "PropertyMedia",
        backref="property",
        cascade="all, delete-orphan",
        order_by="PropertyMedia.uploaded_at.desc()",
    )

    @property
    def profit_loss(self) -> Optional[Decimal]:
        """Sold price minus purchase price, or ``None`` while unsold."""

        if self.status != STATUS_SOLD:
            return None
        return (self.sold_price or Decimal("0")) - (self.purchase_price or Decimal("0"))

    @property
    def listing_price_per_area(self) -> Decimal:
        """Listing price divided by land area (zero when either is missing)."""

        area = self.area or Decimal("0")
        if not self.listing_price or area <= 0:
            return Decimal("0")
        return self.listing_price / area

    @property
    def activity_date(self) -> date:
        """Date used to order the property in activity feeds."""

        if self.status == STATUS_SOLD and self.sold_date:
            return self.sold_date
        return self.purchase_date

    @property
    def address_line(self) -> str:
        parts = [self.street, self.city, self.state, self.zip_code]
        return ", ".join(part for part in parts if part)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Property {self.id} {self.name!r} {self.status}>"


class PropertyMedia(db.Model):
    """A photo, video or document linked to a property."""

    __table_args__ = (
        CheckConstraint(
            "kind IN ('image', 'video', 'document')", name="ck_property_media_kind"
        ),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    property_id: int = db.Column(
        db.Integer, db.ForeignKey("property.id"), nullable=False, index=True
    )
    file_name: str = db.Column(db.String(255), nullable=False)
    url: str = db.Column(db.String(1024), nullable=False)
    kind: str = db.Column(db.String(16), nullable=False, default="document")
    uploaded_at: datetime = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
