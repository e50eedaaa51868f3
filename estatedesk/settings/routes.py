"""HTTP routes for profile, password, timezone and account settings."""
from __future__ import annotations

from flask import flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ..auth.services import get_current_user, login_required, logout_user
from ..extensions import db
from ..logging_service import log_manager
from . import bp
from .services import (
    ProfileValidationError,
    change_password,
    delete_account,
    describe_timezone,
    get_timezone_options,
    set_timezone,
    update_profile,
)


def _render(*, errors: dict[str, str] | None = None, profile: dict[str, str] | None = None, status: int = 200):
    user = get_current_user()
    if profile is None:
        profile = {
            "display_name": user.display_name or "",
            "primary_number": user.primary_number or "",
            "secondary_number": user.secondary_number or "",
        }
    return (
        render_template(
            "settings/preferences.html",
            title="EstateDesk — Settings",
            user=user,
            profile=profile,
            errors=errors or {},
            active_timezone=user.timezone,
            timezone_options=get_timezone_options(),
            timezone_label=describe_timezone(user.timezone),
            active_nav="settings",
        ),
        status,
    )


def _log_failure(action: str, title: str, exc: SQLAlchemyError) -> None:
    log_manager.record(
        component="Settings",
        action=action,
        level="error",
        result="error",
        title=title,
        user_summary="The change could not be saved. Try again shortly.",
        technical_details=f"settings.{action} raised {exc.__class__.__name__}: {exc}",
    )


@bp.route("/", methods=["GET", "POST"])
@login_required
def preferences():
    """Display the settings page and save profile details."""

    if request.method == "GET":
        log_manager.record(
            component="Settings",
            action="view-settings",
            level="info",
            result="success",
            title="Settings viewed",
            user_summary="Settings page opened.",
            technical_details="settings.preferences rendered profile, password and timezone forms.",
        )
        return _render()

    user = get_current_user()
    try:
        update_profile(user, request.form)
    except ProfileValidationError as exc:
        return _render(errors=exc.errors, profile=request.form.to_dict(), status=400)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("update-profile", "Profile update failed", exc)
        flash("We were unable to update your profile.", "error")
        return redirect(url_for("settings.preferences"))

    log_manager.record(
        component="Settings",
        action="update-profile",
        level="info",
        result="success",
        title="Profile updated",
        user_summary=f"Profile saved for {user.display_name}.",
        technical_details=f"settings.preferences updated user_id={user.id}.",
    )
    flash("Profile updated successfully.", "success")
    return redirect(url_for("settings.preferences"))


@bp.post("/password")
@login_required
def password():
    user = get_current_user()
    try:
        change_password(
            user,
            request.form.get("current_password", ""),
            request.form.get("new_password", ""),
            request.form.get("confirm_password", ""),
        )
    except ProfileValidationError as exc:
        log_manager.record(
            component="Settings",
            action="change-password",
            level="warn",
            result="warn",
            title="Password change rejected",
            user_summary=str(exc),
            technical_details=f"settings.password rejected fields {sorted(exc.errors)}.",
        )
        return _render(errors=exc.errors, status=400)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("change-password", "Password change failed", exc)
        flash("Failed to change password.", "error")
        return redirect(url_for("settings.preferences"))

    log_manager.record(
        component="Settings",
        action="change-password",
        level="info",
        result="success",
        title="Password changed",
        user_summary="Account password changed.",
        technical_details=f"settings.password rehashed credentials for user_id={user.id}.",
    )
    flash("Password changed successfully.", "success")
    return redirect(url_for("settings.preferences"))


@bp.post("/timezone")
@login_required
def timezone():
    try:
        user = set_timezone(get_current_user(), request.form.get("timezone", ""))
    except ValueError as exc:
        return _render(errors={"timezone": str(exc)}, status=400)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("update-timezone", "Timezone update failed", exc)
        flash("We were unable to update the timezone. Refresh the page and try again.", "error")
        return redirect(url_for("settings.preferences"))

    label = describe_timezone(user.timezone)
    log_manager.record(
        component="Settings",
        action="update-timezone",
        level="info",
        result="success",
        title="Timezone updated",
        user_summary=f"Display timezone changed to {label}.",
        technical_details=f"settings.set_timezone persisted timezone={user.timezone} for user_id={user.id}",
    )
    flash(f"Timezone updated to {label}.", "success")
    return redirect(url_for("settings.preferences"))


@bp.post("/delete-account")
@login_required
def delete():
    """Permanently delete the account and its portfolio."""

    user = get_current_user()
    user_id, email = user.id, user.email
    try:
        delete_account(user, request.form.get("confirm_email"))
    except ProfileValidationError as exc:
        return _render(errors=exc.errors, status=400)
    except SQLAlchemyError as exc:
        db.session.rollback()
        _log_failure("delete-account", "Account deletion failed", exc)
        flash("Failed to delete account.", "error")
        return redirect(url_for("settings.preferences"))

    logout_user()
    log_manager.record(
        component="Settings",
        action="delete-account",
        level="info",
        result="success",
        title="Account deleted",
        user_summary=f"{email} deleted their account.",
        technical_details=f"settings.delete removed user_id={user_id} with its properties, prospects and logs.",
    )
    flash("Your account has been permanently deleted.", "success")
    return redirect(url_for("auth.login"))
