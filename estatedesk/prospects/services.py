"""Validation and lifecycle helpers for prospects."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ..auth.models import User
from ..extensions import db
from ..properties.models import STATUS_OWNED, Property
from ..properties.services import (
    MAX_AMOUNT,
    format_currency,
    parse_date,
    parse_decimal,
    quantize_amount,
)
from ..settings.services import current_date
from .models import PROSPECT_CONVERTED, PROSPECT_NEW, PROSPECT_STATUSES, Prospect


class ProspectValidationError(ValueError):
    """Raised when submitted prospect data fails validation."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class ProspectConversionError(ValueError):
    """Raised when a prospect cannot be turned into a property."""


def validate_prospect_form(data: Mapping[str, Any], *, default_status: str = PROSPECT_NEW) -> dict[str, Any]:
    """Validate a prospect submission and return cleaned values."""

    errors: dict[str, str] = {}

    deal_name = str(data.get("deal_name") or "").strip()
    if len(deal_name) < 3:
        errors["deal_name"] = "Deal name must be at least 3 characters."

    source = str(data.get("source") or "").strip()
    if len(source) < 2:
        errors["source"] = "Source is required."

    try:
        estimated_value = parse_decimal(data.get("estimated_value"))
    except ValueError:
        estimated_value = None
    if estimated_value is None or estimated_value < 1:
        errors["estimated_value"] = "Must be a positive number"
    elif estimated_value > MAX_AMOUNT:
        errors["estimated_value"] = f"Must be at most {MAX_AMOUNT:,}."

    try:
        date_added = parse_date(data.get("date_added"))
    except ValueError:
        date_added = None
    if date_added is None:
        errors["date_added"] = "A date is required."

    status = str(data.get("status") or "").strip() or default_status
    if status not in PROSPECT_STATUSES:
        errors["status"] = "Please select a valid status."

    if errors:
        raise ProspectValidationError(errors)

    return {
        "deal_name": deal_name,
        "source": source,
        "estimated_value": quantize_amount(estimated_value),
        "date_added": date_added,
        "status": status,
    }


def create_prospect(owner: User, cleaned: Mapping[str, Any]) -> Prospect:
    """Persist a new prospect. New prospects always start as ``New``."""

    prospect = Prospect(
        owner_id=owner.id,
        deal_name=cleaned["deal_name"],
        source=cleaned["source"],
        estimated_value=cleaned["estimated_value"],
        date_added=cleaned["date_added"],
        status=PROSPECT_NEW,
    )
    db.session.add(prospect)
    db.session.commit()
    return prospect


def update_prospect(prospect: Prospect, cleaned: Mapping[str, Any]) -> Prospect:
    """Save edits. Choosing ``Converted`` runs the conversion instead of a plain save."""

    prospect.deal_name = cleaned["deal_name"]
    prospect.source = cleaned["source"]
    prospect.estimated_value = cleaned["estimated_value"]
    prospect.date_added = cleaned["date_added"]

    if cleaned["status"] == PROSPECT_CONVERTED and prospect.status != PROSPECT_CONVERTED:
        convert_prospect(prospect)
        return prospect

    db.session.add(prospect)
    db.session.commit()
    return prospect


def delete_prospect(prospect: Prospect) -> None:
    db.session.delete(prospect)
    db.session.commit()


def convert_prospect(prospect: Prospect) -> Property:
    """Create an owned property from ``prospect`` and mark it converted.

    The new property carries placeholder land details and a zero purchase
    price; the owner completes them on the property edit page.
    """

    if prospect.status == PROSPECT_CONVERTED:
        raise ProspectConversionError("This prospect has already been converted.")

    record = Property(
        owner_id=prospect.owner_id,
        name=prospect.deal_name,
        street="",
        city="",
        state="",
        zip_code="",
        area=0,
        area_unit="Square Feet",
        property_type="Open Land",
        is_diverted=False,
        purchase_date=current_date(prospect.owner),
        purchase_price=quantize_amount(0),
        status=STATUS_OWNED,
        is_listed_publicly=False,
        remarks=(
            f"Converted from prospect. Source: {prospect.source}."
            f" Estimated value: {format_currency(prospect.estimated_value)}."
        ),
    )
    db.session.add(record)
    db.session.flush()

    prospect.status = PROSPECT_CONVERTED
    prospect.converted_property_id = record.id
    db.session.add(prospect)
    db.session.commit()
    return record


def find_owned_prospect(owner: User, prospect_id: int) -> Optional[Prospect]:
    return Prospect.query.filter_by(id=prospect_id, owner_id=owner.id).first()


def fetch_prospects(owner: User) -> list[Prospect]:
    return (
        Prospect.query.filter_by(owner_id=owner.id)
        .order_by(Prospect.date_added.desc(), Prospect.id.desc())
        .all()
    )


def form_values(prospect: Prospect | None = None) -> dict[str, Any]:
    if prospect is None:
        return {
            "deal_name": "",
            "source": "",
            "estimated_value": "",
            "date_added": current_date().isoformat(),
            "status": PROSPECT_NEW,
        }
    return {
        "deal_name": prospect.deal_name,
        "source": prospect.source,
        "estimated_value": prospect.estimated_value,
        "date_added": prospect.date_added.isoformat(),
        "status": prospect.status,
    }
