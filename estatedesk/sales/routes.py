"""Routes for reviewing and correcting sold properties."""
from __future__ import annotations

from flask import abort, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ..auth.services import get_current_user, login_required
from ..extensions import db
from ..logging_service import log_manager
from ..properties.models import STATUS_SOLD, Property
from ..properties.services import delete_property, find_owned_property, format_currency
from . import bp
from .services import (
    available_sale_years,
    fetch_sold_properties,
    mark_property_unsold,
    parse_year_filter,
    summarize_sales,
)


def _sold_property_or_404(property_id: int) -> Property:
    record = find_owned_property(get_current_user(), property_id)
    if record is None or record.status != STATUS_SOLD:
        abort(404)
    return record


@bp.route("/")
@login_required
def history():
    """Show sold properties with their profit or loss, optionally for one year."""

    user = get_current_user()
    year = parse_year_filter(request.args.get("year"))
    properties = fetch_sold_properties(user, year)
    summary = summarize_sales(properties)
    losses = [record for record in properties if record.profit_loss < 0]

    log_manager.record(
        component="Sales",
        action="view",
        level="info",
        result="success",
        title="Sales history opened",
        user_summary=(
            f"{summary.count} sold properties with net {format_currency(summary.net_profit_loss)}."
        ),
        technical_details=f"sales.history rendered sold properties for year={year or 'all'}.",
    )
    if losses:
        log_manager.record(
            component="Sales",
            action="loss-check",
            level="warn",
            result="warn",
            title="Properties sold at a loss",
            user_summary=f"{len(losses)} sold properties closed below their purchase price.",
            technical_details="sales.history found sold_price < purchase_price on "
            + ", ".join(f"property_id={record.id}" for record in losses),
        )

    return render_template(
        "sales/history.html",
        title="EstateDesk — Sold Properties",
        properties=properties,
        summary=summary,
        years=available_sale_years(user),
        selected_year=year,
        format_currency=format_currency,
        active_nav="sales",
    )


@bp.post("/<int:property_id>/unsell")
@login_required
def unsell(property_id: int):
    record = _sold_property_or_404(property_id)
    try:
        mark_property_unsold(record)
    except SQLAlchemyError as exc:
        db.session.rollback()
        log_manager.record(
            component="Sales",
            action="unsell",
            level="error",
            result="error",
            title="Marking property as unsold failed",
            user_summary="Failed to update property.",
            technical_details=f"sales.unsell raised {exc.__class__.__name__}: {exc}",
        )
        flash("Failed to update property.", "error")
        return redirect(url_for("sales.history"))

    log_manager.record(
        component="Sales",
        action="unsell",
        level="info",
        result="success",
        title="Property marked as unsold",
        user_summary=f"{record.name} moved back to Properties.",
        technical_details=f"sales.unsell reset property_id={record.id} to Owned.",
    )
    flash("Property marked as unsold and moved to Properties.", "success")
    return redirect(url_for("sales.history"))


@bp.post("/<int:property_id>/delete")
@login_required
def delete(property_id: int):
    record = _sold_property_or_404(property_id)
    name = record.name
    try:
        delete_property(record)
    except SQLAlchemyError as exc:
        db.session.rollback()
        log_manager.record(
            component="Sales",
            action="delete",
            level="error",
            result="error",
            title="Sold property deletion failed",
            user_summary="Failed to delete property.",
            technical_details=f"sales.delete raised {exc.__class__.__name__}: {exc}",
        )
        flash("Failed to delete property.", "error")
        return redirect(url_for("sales.history"))

    log_manager.record(
        component="Sales",
        action="delete",
        level="info",
        result="success",
        title="Sold property deleted",
        user_summary=f"{name} deleted permanently.",
        technical_details=f"sales.delete removed property_id={property_id}.",
    )
    flash("Property deleted permanently.", "success")
    return redirect(url_for("sales.history"))
