"""Portfolio figures for the dashboard."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ..auth.models import User
from ..properties.models import STATUS_SOLD, Property
from ..properties.services import quantize_amount
from ..prospects.models import ACTIVE_PROSPECT_STATUSES, Prospect

RECENT_ACTIVITY_LIMIT = 5


@dataclass
class DashboardSummary:
    total_properties: int
    active_prospects: int
    portfolio_value: Decimal
    recent_activity: list[Property] = field(default_factory=list)
    map_markers: list[dict[str, Any]] = field(default_factory=list)


def recent_activity(properties: list[Property], limit: int = RECENT_ACTIVITY_LIMIT) -> list[Property]:
    """Newest first by sold date for sold properties, purchase date otherwise."""

    return sorted(
        properties,
        key=lambda record: (record.activity_date, record.id),
        reverse=True,
    )[:limit]


def map_markers(properties: list[Property]) -> list[dict[str, Any]]:
    """Marker data for every property that has been placed on the map."""

    return [
        {
            "id": record.id,
            "name": record.name,
            "status": record.status,
            "latitude": record.latitude,
            "longitude": record.longitude,
        }
        for record in sorted(properties, key=lambda record: record.id)
        if record.latitude is not None and record.longitude is not None
    ]


def build_dashboard(owner: User) -> DashboardSummary:
    properties = Property.query.filter_by(owner_id=owner.id).all()
    active = [record for record in properties if record.status != STATUS_SOLD]
    portfolio_value = sum(
        (record.purchase_price or Decimal("0") for record in active), Decimal("0")
    )
    active_prospects = Prospect.query.filter(
        Prospect.owner_id == owner.id, Prospect.status.in_(ACTIVE_PROSPECT_STATUSES)
    ).count()

    return DashboardSummary(
        total_properties=len(active),
        active_prospects=active_prospects,
        portfolio_value=quantize_amount(portfolio_value),
        recent_activity=recent_activity(properties),
        map_markers=map_markers(properties),
    )
