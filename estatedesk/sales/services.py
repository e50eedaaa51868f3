"""Helpers for the sold property history."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..auth.models import User
from ..extensions import db
from ..properties.models import STATUS_OWNED, STATUS_SOLD, Property
from ..properties.services import quantize_amount


@dataclass(frozen=True)
class SalesSummary:
    """Aggregate figures across the sold properties on display."""

    count: int
    total_revenue: Decimal
    total_cost: Decimal
    net_profit_loss: Decimal


def fetch_sold_properties(owner: User, year: Optional[int] = None) -> list[Property]:
    """Return sold properties, most recent sale first, optionally for one sale year."""

    query = Property.query.filter_by(owner_id=owner.id, status=STATUS_SOLD)
    if year is not None:
        query = query.filter(
            Property.sold_date >= date(year, 1, 1), Property.sold_date < date(year + 1, 1, 1)
        )
    return query.order_by(Property.sold_date.desc(), Property.id.desc()).all()


def available_sale_years(owner: User) -> list[int]:
    """Years in which the owner sold something, newest first."""

    rows = (
        db.session.query(Property.sold_date)
        .filter(Property.owner_id == owner.id, Property.status == STATUS_SOLD)
        .filter(Property.sold_date.isnot(None))
        .all()
    )
    return sorted({sold_date.year for (sold_date,) in rows}, reverse=True)


def parse_year_filter(raw: Any) -> Optional[int]:
    """Turn the ``year`` query argument into a year, ``None`` meaning all years."""

    value = str(raw or "").strip()
    if not value or value == "all" or not value.isdigit():
        return None
    year = int(value)
    if not date.min.year <= year < date.max.year:
        return None
    return year


def summarize_sales(properties: list[Property]) -> SalesSummary:
    revenue = sum((record.sold_price or Decimal("0") for record in properties), Decimal("0"))
    cost = sum((record.purchase_price or Decimal("0") for record in properties), Decimal("0"))
    return SalesSummary(
        count=len(properties),
        total_revenue=quantize_amount(revenue),
        total_cost=quantize_amount(cost),
        net_profit_loss=quantize_amount(revenue - cost),
    )


def mark_property_unsold(record: Property) -> Property:
    """Move a sold property back into the owned portfolio."""

    if record.status != STATUS_SOLD:
        raise ValueError("Only sold properties can be marked as unsold.")
    record.status = STATUS_OWNED
    record.sold_price = None
    record.sold_date = None
    db.session.add(record)
    db.session.commit()
    return record
