"""Routes for managing the signed-in user's property portfolio."""
from __future__ import annotations

from flask import abort, flash, jsonify, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ..auth.services import api_login_required, get_current_user, login_required
from ..extensions import db
from ..logging_service import log_manager
from . import bp
from .models import (
    AREA_UNITS,
    LAND_TYPES,
    PROPERTY_STATUSES,
    PROPERTY_TYPES,
    STATUS_SOLD,
    Property,
    PropertyMedia,
)
from .services import (
    PropertyValidationError,
    attach_media,
    create_property,
    delete_property,
    fetch_active_properties,
    find_owned_property,
    form_values,
    format_currency,
    mark_property_sold,
    remove_media,
    serialize_property,
    suggested_sale_price,
    update_property,
    validate_property_form,
)


def _owned_property_or_404(property_id: int) -> Property:
    record = find_owned_property(get_current_user(), property_id)
    if record is None:
        abort(404)
    return record


def _render_form(
    *,
    mode: str,
    values: dict[str, object],
    errors: dict[str, str] | None = None,
    record: Property | None = None,
    status: int = 200,
):
    return (
        render_template(
            "properties/form.html",
            title="EstateDesk — " + ("Add Property" if mode == "add" else "Edit Property"),
            mode=mode,
            values=values,
            errors=errors or {},
            record=record,
            property_types=PROPERTY_TYPES,
            area_units=AREA_UNITS,
            land_types=LAND_TYPES,
            statuses=PROPERTY_STATUSES,
            format_currency=format_currency,
            active_nav="properties",
        ),
        status,
    )


def _log_write_failure(action: str, title: str, exc: SQLAlchemyError) -> None:
    log_manager.record(
        component="Properties",
        action=action,
        level="error",
        result="error",
        title=title,
        user_summary="The property could not be saved. Try again shortly.",
        technical_details=f"properties.{action} raised {exc.__class__.__name__}: {exc}",
    )


@bp.route("/")
@login_required
def portfolio():
    """List the properties the user still holds."""

    user = get_current_user()
    properties = fetch_active_properties(user)
    log_manager.record(
        component="Properties",
        action="view",
        level="info",
        result="success",
        title="Property portfolio opened",
        user_summary=f"{len(properties)} active properties displayed.",
        technical_details="properties.portfolio served owned and for-sale properties.",
    )
    return render_template(
        "properties/list.html",
        title="EstateDesk — Properties",
        properties=properties,
        suggested_prices={record.id: suggested_sale_price(record) for record in properties},
        format_currency=format_currency,
        active_nav="properties",
    )


@bp.route("/new", methods=["GET", "POST"])
@login_required
def create():
    """Add a property to the portfolio."""

    if request.method == "GET":
        return _render_form(mode="add", values=form_values())

    try:
        cleaned = validate_property_form(request.form)
        record = create_property(get_current_user(), cleaned)
    except PropertyValidationError as exc:
        return _render_form(
            mode="add", values=request.form.to_dict(), errors=exc.errors, status=400
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_write_failure("create", "Property creation failed", exc)
        flash("Failed to save property. Please try again.", "error")
        return _render_form(mode="add", values=request.form.to_dict(), status=500)

    log_manager.record(
        component="Properties",
        action="create",
        level="info",
        result="success",
        title="Property added",
        user_summary=f"{record.name} added with purchase value {format_currency(record.purchase_price)}.",
        technical_details=f"properties.create stored property_id={record.id} status={record.status}.",
    )
    flash("Property added successfully.", "success")
    if record.status == STATUS_SOLD:
        return redirect(url_for("sales.history"))
    return redirect(url_for("properties.portfolio"))


@bp.route("/<int:property_id>", methods=["GET", "POST"])
@login_required
def edit(property_id: int):
    """Show and update a single property."""

    record = _owned_property_or_404(property_id)

    if request.method == "GET":
        return _render_form(mode="edit", values=form_values(record), record=record)

    try:
        cleaned = validate_property_form(request.form)
        update_property(record, cleaned)
    except PropertyValidationError as exc:
        return _render_form(
            mode="edit",
            values=request.form.to_dict(),
            errors=exc.errors,
            record=record,
            status=400,
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_write_failure("update", "Property update failed", exc)
        flash("Failed to update property.", "error")
        return redirect(url_for("properties.edit", property_id=property_id))

    log_manager.record(
        component="Properties",
        action="update",
        level="info",
        result="success",
        title="Property updated",
        user_summary=f"{record.name} saved with status {record.status}.",
        technical_details=f"properties.edit updated property_id={record.id}.",
    )
    flash("Property updated successfully.", "success")
    if record.status == STATUS_SOLD:
        return redirect(url_for("sales.history"))
    return redirect(url_for("properties.edit", property_id=record.id))


@bp.post("/<int:property_id>/delete")
@login_required
def delete(property_id: int):
    record = _owned_property_or_404(property_id)
    name = record.name
    try:
        delete_property(record)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_write_failure("delete", "Property deletion failed", exc)
        flash("Failed to delete property.", "error")
        return redirect(url_for("properties.portfolio"))

    log_manager.record(
        component="Properties",
        action="delete",
        level="info",
        result="success",
        title="Property deleted",
        user_summary=f"{name} removed from the portfolio.",
        technical_details=f"properties.delete removed property_id={property_id}.",
    )
    flash("Property deleted successfully.", "success")
    return redirect(url_for("properties.portfolio"))


@bp.post("/<int:property_id>/sell")
@login_required
def sell(property_id: int):
    """Mark a property as sold and move it to the sales history."""

    record = _owned_property_or_404(property_id)
    try:
        mark_property_sold(record, request.form.get("sold_price"), request.form.get("sold_date"))
    except PropertyValidationError as exc:
        flash(" ".join(exc.errors.values()), "error")
        return redirect(url_for("properties.portfolio"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_write_failure("sell", "Marking property as sold failed", exc)
        flash("Failed to mark property as sold.", "error")
        return redirect(url_for("properties.portfolio"))

    log_manager.record(
        component="Properties",
        action="sell",
        level="info",
        result="success",
        title="Property sold",
        user_summary=(
            f"{record.name} sold for {format_currency(record.sold_price)}"
            f" ({format_currency(record.profit_loss)} profit/loss)."
        ),
        technical_details=f"properties.sell set status=Sold on property_id={record.id}.",
    )
    flash("Property marked as sold and moved to Sales History.", "success")
    return redirect(url_for("sales.history"))


@bp.post("/<int:property_id>/media")
@login_required
def add_media(property_id: int):
    record = _owned_property_or_404(property_id)
    try:
        media = attach_media(record, request.form.get("file_name", ""), request.form.get("url", ""))
    except PropertyValidationError as exc:
        flash(" ".join(exc.errors.values()), "error")
        return redirect(url_for("properties.edit", property_id=property_id))
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_write_failure("add-media", "Media upload failed", exc)
        flash("Failed to attach the file.", "error")
        return redirect(url_for("properties.edit", property_id=property_id))

    log_manager.record(
        component="Properties",
        action="add-media",
        level="info",
        result="success",
        title="Media attached",
        user_summary=f"{media.file_name} attached to {record.name}.",
        technical_details=f"properties.add_media stored media_id={media.id} kind={media.kind}.",
    )
    flash("File uploaded successfully.", "success")
    return redirect(url_for("properties.edit", property_id=property_id))


@bp.post("/<int:property_id>/media/<int:media_id>/delete")
@login_required
def delete_media(property_id: int, media_id: int):
    record = _owned_property_or_404(property_id)
    media = PropertyMedia.query.filter_by(id=media_id, property_id=record.id).first()
    if media is None:
        abort(404)
    try:
        remove_media(media)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_write_failure("delete-media", "Media removal failed", exc)
        flash("Failed to delete the file.", "error")
    else:
        flash("File deleted.", "success")
    return redirect(url_for("properties.edit", property_id=property_id))


@bp.get("/api")
@api_login_required
def api_list():
    """Return the user's active properties as JSON."""

    properties = fetch_active_properties(get_current_user())
    return jsonify(
        {"success": True, "properties": [serialize_property(record) for record in properties]}
    )


@bp.get("/api/<int:property_id>")
@api_login_required
def api_detail(property_id: int):
    record = find_owned_property(get_current_user(), property_id)
    if record is None:
        response = jsonify(
            {"success": False, "message": "Property not found or you do not have access."}
        )
        response.status_code = 404
        return response
    return jsonify({"success": True, "property": serialize_property(record)})
