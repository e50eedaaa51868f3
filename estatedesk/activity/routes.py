"""Routes for reviewing the signed-in user's activity log."""
from __future__ import annotations

from flask import jsonify, render_template, request

from ..auth.services import api_login_required, get_current_user, login_required
from ..logging_service import log_manager
from . import bp


@bp.route("/")
@login_required
def console():
    """Render the activity console."""
    log_manager.record(
        component="Activity",
        action="view",
        level="info",
        result="success",
        title="Activity console accessed",
        user_summary="Activity log opened for review.",
        technical_details="activity.console rendered the log viewer.",
    )
    user = get_current_user()
    return render_template(
        "activity/console.html",
        title="EstateDesk — Activity",
        logs=log_manager.fetch_logs(user_id=user.id, limit=50),
        log_levels=log_manager.available_levels,
        log_components=log_manager.available_components,
        active_nav="logs",
    )


@bp.route("/feed")
@api_login_required
def feed():
    """Return filtered logs as JSON data."""
    user = get_current_user()
    level = request.args.get("level")
    component = request.args.get("component")
    search = request.args.get("search")
    limit = min(request.args.get("limit", type=int) or 50, 200)
    logs = log_manager.fetch_logs(
        user_id=user.id, level=level, component=component, search=search, limit=limit
    )
    return jsonify(
        {
            "logs": logs,
            "latest": log_manager.latest_timestamp(user_id=user.id),
        }
    )
