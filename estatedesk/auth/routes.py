"""Routes for signing in, registering and signing out."""
from __future__ import annotations

from flask import flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..logging_service import log_manager
from . import bp
from .services import (
    AuthenticationError,
    authenticate,
    get_current_user,
    login_user,
    logout_user,
    register_user,
)


def _safe_next(target: str | None) -> str:
    """Only follow redirects that stay on this site."""

    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("dashboard.home")


@bp.route("/login", methods=["GET", "POST"])
def login():
    """Sign in with an email and password."""

    if get_current_user() is not None:
        return redirect(url_for("dashboard.home"))

    email = ""
    error: str | None = None
    status = 200

    if request.method == "POST":
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        try:
            user = authenticate(email, password)
        except AuthenticationError as exc:
            error = str(exc)
            status = 401
            log_manager.record(
                component="Auth",
                action="login",
                level="warn",
                result="warn",
                title="Sign-in rejected",
                user_summary="A sign-in attempt was rejected.",
                technical_details=f"auth.login refused credentials for email={email.strip()!r}: {exc}",
            )
        else:
            login_user(user)
            log_manager.record(
                component="Auth",
                action="login",
                level="info",
                result="success",
                title="Signed in",
                user_summary=f"{user.email} signed in.",
                technical_details=f"auth.login started a session for user_id={user.id}.",
            )
            return redirect(_safe_next(request.args.get("next")))

    return (
        render_template(
            "auth/login.html",
            title="EstateDesk — Sign in",
            email=email,
            error=error,
            next_url=request.args.get("next", ""),
        ),
        status,
    )


@bp.route("/register", methods=["GET", "POST"])
def register():
    """Create a new portfolio account."""

    if get_current_user() is not None:
        return redirect(url_for("dashboard.home"))

    form = {"email": "", "display_name": ""}
    error: str | None = None
    status = 200

    if request.method == "POST":
        form = {
            "email": request.form.get("email", ""),
            "display_name": request.form.get("display_name", ""),
        }
        password = request.form.get("password", "")
        confirm = request.form.get("confirm_password", "")
        try:
            if password != confirm:
                raise AuthenticationError("Passwords do not match.")
            user = register_user(form["email"], password, form["display_name"])
        except AuthenticationError as exc:
            error = str(exc)
            status = 400
        except SQLAlchemyError as exc:
            db.session.rollback()
            log_manager.record(
                component="Auth",
                action="register",
                level="error",
                result="error",
                title="Registration failed",
                user_summary="The account could not be created.",
                technical_details=f"auth.register raised {exc.__class__.__name__}: {exc}",
            )
            error = "We could not create your account. Please try again."
            status = 500
        else:
            login_user(user)
            log_manager.record(
                component="Auth",
                action="register",
                level="info",
                result="success",
                title="Account created",
                user_summary=f"Account registered for {user.email}.",
                technical_details=f"auth.register created user_id={user.id}.",
            )
            flash("Welcome to EstateDesk.", "success")
            return redirect(url_for("dashboard.home"))

    return (
        render_template(
            "auth/register.html",
            title="EstateDesk — Create account",
            form=form,
            error=error,
        ),
        status,
    )


@bp.post("/logout")
def logout():
    """End the current session."""

    user = get_current_user()
    if user is not None:
        log_manager.record(
            component="Auth",
            action="logout",
            level="info",
            result="success",
            title="Signed out",
            user_summary=f"{user.email} signed out.",
            technical_details=f"auth.logout cleared the session for user_id={user.id}.",
        )
    logout_user()
    return redirect(url_for("auth.login"))
