"""Routes for the prospect pipeline."""
from __future__ import annotations

from flask import abort, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ..auth.services import get_current_user, login_required
from ..extensions import db
from ..logging_service import log_manager
from ..properties.services import format_currency
from . import bp
from .models import PROSPECT_CONVERTED, PROSPECT_STATUSES, Prospect
from .services import (
    ProspectConversionError,
    ProspectValidationError,
    convert_prospect,
    create_prospect,
    delete_prospect,
    fetch_prospects,
    find_owned_prospect,
    form_values,
    update_prospect,
    validate_prospect_form,
)


def _owned_prospect_or_404(prospect_id: int) -> Prospect:
    prospect = find_owned_prospect(get_current_user(), prospect_id)
    if prospect is None:
        abort(404)
    return prospect


def _render_form(*, mode, values, errors=None, prospect=None, status=200):
    return (
        render_template(
            "prospects/form.html",
            title="EstateDesk — " + ("Add Prospect" if mode == "add" else "Edit Prospect"),
            mode=mode,
            values=values,
            errors=errors or {},
            prospect=prospect,
            statuses=PROSPECT_STATUSES,
            active_nav="prospects",
        ),
        status,
    )


def _log_failure(action: str, title: str, exc: Exception) -> None:
    log_manager.record(
        component="Prospects",
        action=action,
        level="error",
        result="error",
        title=title,
        user_summary="The prospect could not be saved. Try again shortly.",
        technical_details=f"prospects.{action} raised {exc.__class__.__name__}: {exc}",
    )


def _log_conversion(prospect: Prospect) -> None:
    log_manager.record(
        component="Prospects",
        action="convert",
        level="info",
        result="success",
        title="Prospect converted",
        user_summary=f"{prospect.deal_name} converted into a property.",
        technical_details=(
            f"prospects.convert created property_id={prospect.converted_property_id}"
            f" from prospect_id={prospect.id}."
        ),
    )


@bp.route("/")
@login_required
def pipeline():
    """List the user's prospects."""

    prospects = fetch_prospects(get_current_user())
    log_manager.record(
        component="Prospects",
        action="view",
        level="info",
        result="success",
        title="Prospect pipeline opened",
        user_summary=f"{len(prospects)} prospects displayed.",
        technical_details="prospects.pipeline served the prospect table.",
    )
    return render_template(
        "prospects/list.html",
        title="EstateDesk — Prospects",
        prospects=prospects,
        format_currency=format_currency,
        active_nav="prospects",
    )


@bp.route("/new", methods=["GET", "POST"])
@login_required
def create():
    if request.method == "GET":
        return _render_form(mode="add", values=form_values())

    try:
        cleaned = validate_prospect_form(request.form)
        prospect = create_prospect(get_current_user(), cleaned)
    except ProspectValidationError as exc:
        return _render_form(mode="add", values=request.form.to_dict(), errors=exc.errors, status=400)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("create", "Prospect creation failed", exc)
        flash("Failed to save prospect. Please try again.", "error")
        return _render_form(mode="add", values=request.form.to_dict(), status=500)

    log_manager.record(
        component="Prospects",
        action="create",
        level="info",
        result="success",
        title="Prospect added",
        user_summary=(
            f"{prospect.deal_name} added from {prospect.source}"
            f" at {format_currency(prospect.estimated_value)}."
        ),
        technical_details=f"prospects.create stored prospect_id={prospect.id}.",
    )
    flash("Prospect added successfully.", "success")
    return redirect(url_for("prospects.pipeline"))


@bp.route("/<int:prospect_id>", methods=["GET", "POST"])
@login_required
def edit(prospect_id: int):
    """Show and update a prospect; saving as Converted converts it."""

    prospect = _owned_prospect_or_404(prospect_id)

    if request.method == "GET":
        return _render_form(mode="edit", values=form_values(prospect), prospect=prospect)

    was_converted = prospect.status == PROSPECT_CONVERTED
    try:
        cleaned = validate_prospect_form(request.form, default_status=prospect.status)
        update_prospect(prospect, cleaned)
    except ProspectValidationError as exc:
        return _render_form(
            mode="edit", values=request.form.to_dict(), errors=exc.errors, prospect=prospect, status=400
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("update", "Prospect update failed", exc)
        flash("Failed to update prospect.", "error")
        return redirect(url_for("prospects.edit", prospect_id=prospect_id))

    if not was_converted and prospect.status == PROSPECT_CONVERTED:
        _log_conversion(prospect)
        flash("Prospect converted. You can now edit the full property details.", "success")
        return redirect(url_for("properties.edit", property_id=prospect.converted_property_id))

    log_manager.record(
        component="Prospects",
        action="update",
        level="info",
        result="success",
        title="Prospect updated",
        user_summary=f"{prospect.deal_name} saved.",
        technical_details=f"prospects.edit updated prospect_id={prospect.id}.",
    )
    flash("Prospect updated successfully.", "success")
    return redirect(url_for("prospects.edit", prospect_id=prospect.id))


@bp.post("/<int:prospect_id>/convert")
@login_required
def convert(prospect_id: int):
    prospect = _owned_prospect_or_404(prospect_id)
    try:
        record = convert_prospect(prospect)
    except ProspectConversionError as exc:
        flash(str(exc), "error")
        return redirect(url_for("prospects.pipeline"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("convert", "Prospect conversion failed", exc)
        flash("Could not convert the prospect to a property.", "error")
        return redirect(url_for("prospects.pipeline"))

    _log_conversion(prospect)
    flash("Prospect converted. You can now edit the full property details.", "success")
    return redirect(url_for("properties.edit", property_id=record.id))


@bp.post("/<int:prospect_id>/delete")
@login_required
def delete(prospect_id: int):
    prospect = _owned_prospect_or_404(prospect_id)
    name = prospect.deal_name
    try:
        delete_prospect(prospect)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("delete", "Prospect deletion failed", exc)
        flash("Failed to delete prospect.", "error")
        return redirect(url_for("prospects.pipeline"))

    log_manager.record(
        component="Prospects",
        action="delete",
        level="info",
        result="success",
        title="Prospect deleted",
        user_summary=f"{name} removed from the pipeline.",
        technical_details=f"prospects.delete removed prospect_id={prospect_id}.",
    )
    flash("Prospect deleted successfully.", "success")
    return redirect(url_for("prospects.pipeline"))
