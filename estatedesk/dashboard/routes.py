"""Routes for the portfolio dashboard."""
from __future__ import annotations

from flask import jsonify, render_template

from ..auth.services import api_login_required, get_current_user, login_required
from ..logging_service import log_manager
from ..properties.services import decimal_to_number, format_crore, format_currency
from . import bp
from .services import build_dashboard


@bp.route("/")
@login_required
def home():
    """Render KPIs and recent portfolio activity."""

    summary = build_dashboard(get_current_user())
    log_manager.record(
        component="Dashboard",
        action="view",
        level="info",
        result="success",
        title="Dashboard opened",
        user_summary=(
            f"{summary.total_properties} properties worth {format_crore(summary.portfolio_value)}"
            f" and {summary.active_prospects} active prospects."
        ),
        technical_details="dashboard.home computed KPIs and recent activity.",
    )
    kpis = [
        {"title": "Total Properties", "value": f"{summary.total_properties:,}"},
        {"title": "Active Prospects", "value": f"{summary.active_prospects:,}"},
        {"title": "Portfolio Value", "value": format_crore(summary.portfolio_value)},
    ]
    return render_template(
        "dashboard/home.html",
        title="EstateDesk — Dashboard",
        kpis=kpis,
        recent_activity=summary.recent_activity,
        map_markers=summary.map_markers,
        format_currency=format_currency,
        active_nav="dashboard",
    )


@bp.get("/api/summary")
@api_login_required
def api_summary():
    summary = build_dashboard(get_current_user())
    return jsonify(
        {
            "success": True,
            "total_properties": summary.total_properties,
            "active_prospects": summary.active_prospects,
            "portfolio_value": decimal_to_number(summary.portfolio_value),
            "portfolio_value_display": format_crore(summary.portfolio_value),
            "recent_activity": [
                {
                    "id": record.id,
                    "name": record.name,
                    "status": record.status,
                    "date": record.activity_date.isoformat(),
                }
                for record in summary.recent_activity
            ],
            "map_markers": summary.map_markers,
        }
    )
