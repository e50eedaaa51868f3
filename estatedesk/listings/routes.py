"""Routes for the owner listing view and the public listing pages."""
from __future__ import annotations

from flask import abort, render_template

from ..auth.services import get_current_user, login_required
from ..logging_service import log_manager
from ..properties.services import format_currency
from . import bp
from .services import (
    fetch_owner_listings,
    fetch_public_listings,
    find_public_listing,
    public_listings_url,
)


@bp.route("/listings/")
@login_required
def owner_listings():
    """Show the user's publicly listed properties and the share link."""

    properties = fetch_owner_listings(get_current_user())
    log_manager.record(
        component="Listings",
        action="view",
        level="info",
        result="success",
        title="Listings opened",
        user_summary=f"{len(properties)} publicly listed properties displayed.",
        technical_details="listings.owner_listings served listed properties.",
    )
    return render_template(
        "listings/owner.html",
        title="EstateDesk — Listings",
        properties=properties,
        public_url=public_listings_url(),
        format_currency=format_currency,
        active_nav="listings",
    )


@bp.route("/public-listings/")
def public_index():
    """Public catalogue of every listed property."""

    properties = fetch_public_listings()
    return render_template(
        "listings/public_index.html",
        title="Properties for Sale",
        properties=properties,
        format_currency=format_currency,
    )


@bp.route("/public-listings/<int:property_id>")
def public_detail(property_id: int):
    record = find_public_listing(property_id)
    if record is None:
        log_manager.record(
            component="Listings",
            action="public-detail",
            level="warn",
            result="warn",
            title="Unlisted property requested",
            user_summary="A visitor opened a listing that is not public.",
            technical_details=f"listings.public_detail found no public listing for property_id={property_id}.",
        )
        abort(404)
    return render_template(
        "listings/public_detail.html",
        title=record.name,
        record=record,
        price_per_unit=record.listing_price_per_area,
        format_currency=format_currency,
    )
