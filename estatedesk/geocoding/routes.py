"""JSON endpoints backing the address autocomplete on property forms."""
from __future__ import annotations

from flask import jsonify, request

from ..auth.services import api_login_required
from ..logging_service import log_manager
from . import bp
from .services import GeocodingError, locate_address, reverse_lookup, suggest_addresses


def _json_error(message: str, *, status: int = 400):
    response = jsonify({"success": False, "message": message})
    response.status_code = status
    return response


def _log_upstream_failure(action: str, exc: GeocodingError) -> None:
    cause = exc.__cause__
    log_manager.record(
        component="Geocoding",
        action=action,
        level="error",
        result="error",
        title="Address service unavailable",
        user_summary=str(exc),
        technical_details=(
            f"geocoding.{action} failed: {cause.__class__.__name__}: {cause}"
            if cause
            else f"geocoding.{action} failed: {exc}"
        ),
    )


@bp.get("/search")
@api_login_required
def search():
    """Return address suggestions for the autocomplete box."""

    try:
        suggestions = suggest_addresses(request.args.get("q"))
    except GeocodingError as exc:
        _log_upstream_failure("search", exc)
        return _json_error(str(exc), status=502)
    return jsonify({"success": True, "suggestions": suggestions})


@bp.get("/locate")
@api_login_required
def locate():
    """Find a typed address on the map."""

    try:
        address = locate_address(
            request.args.get("street"),
            request.args.get("city"),
            request.args.get("state"),
            request.args.get("zip"),
        )
    except GeocodingError as exc:
        _log_upstream_failure("locate", exc)
        return _json_error(str(exc), status=502)
    except ValueError as exc:
        return _json_error(str(exc))
    if address is None:
        return _json_error("Could not find a location for the provided address.", status=404)
    return jsonify({"success": True, "address": address})


@bp.get("/reverse")
@api_login_required
def reverse():
    """Fill address fields for a dragged map marker."""

    try:
        address = reverse_lookup(request.args.get("lat"), request.args.get("lon"))
    except GeocodingError as exc:
        _log_upstream_failure("reverse", exc)
        return _json_error(str(exc), status=502)
    except ValueError as exc:
        return _json_error(str(exc))
    if address is None:
        return _json_error("Could not find address details for this location.", status=404)
    return jsonify({"success": True, "address": address})
