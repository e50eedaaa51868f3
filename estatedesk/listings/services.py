"""Queries behind the listing pages."""
from __future__ import annotations

from typing import Optional

from flask import current_app, url_for

from ..auth.models import User
from ..properties.models import STATUS_SOLD, Property


def _listed_query():
    return Property.query.filter(
        Property.is_listed_publicly.is_(True), Property.status != STATUS_SOLD
    )


def fetch_owner_listings(owner: User) -> list[Property]:
    """Return the owner's properties that appear on the public page."""

    return _listed_query().filter(Property.owner_id == owner.id).order_by(Property.name).all()


def fetch_public_listings() -> list[Property]:
    return _listed_query().order_by(Property.updated_at.desc(), Property.id.desc()).all()


def find_public_listing(property_id: int) -> Optional[Property]:
    return _listed_query().filter(Property.id == property_id).first()


def public_listings_url() -> str:
    """Absolute link to the public listings page for sharing."""

    base = (current_app.config.get("PUBLIC_BASE_URL") or "").rstrip("/")
    if base:
        return base + url_for("listings.public_index")
    return url_for("listings.public_index", _external=True)
