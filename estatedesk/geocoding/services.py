"""Turn geocoder results into the structured address fields used by forms."""
from __future__ import annotations

from typing import Any, Optional

import httpx
from flask import current_app

from .client import NominatimClient

MIN_QUERY_LENGTH = 3
SUGGESTION_LIMIT = 5


class GeocodingError(RuntimeError):
    """Raised when the address service cannot be reached or fails."""


def init_geocoder(app, transport: Optional[httpx.BaseTransport] = None) -> NominatimClient:
    """Create the geocoder for ``app`` from its configuration."""

    previous = app.extensions.pop("geocoder", None)
    if previous is not None:
        previous.close()
    client = NominatimClient(
        base_url=app.config["GEOCODER_URL"],
        user_agent=app.config["GEOCODER_USER_AGENT"],
        country_codes=app.config.get("GEOCODER_COUNTRY", ""),
        timeout=app.config.get("GEOCODER_TIMEOUT", 10.0),
        transport=transport,
    )
    app.extensions["geocoder"] = client
    return client


def get_geocoder() -> NominatimClient:
    return current_app.extensions["geocoder"]


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def address_from_result(result: dict[str, Any]) -> dict[str, Any]:
    """Map a Nominatim result onto street/city/state/zip/lat/lon fields."""

    address = result.get("address") or {}
    return {
        "street": address.get("road") or address.get("suburb") or address.get("neighbourhood") or "",
        "city": address.get("city") or address.get("town") or address.get("village") or "",
        "state": address.get("state") or "",
        "zip": address.get("postcode") or "",
        "latitude": _to_float(result.get("lat")),
        "longitude": _to_float(result.get("lon")),
        "display_name": result.get("display_name") or "",
    }


def suggest_addresses(query: str | None) -> list[dict[str, Any]]:
    """Return address suggestions, or nothing for very short queries."""

    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []
    try:
        results = get_geocoder().search(query, limit=SUGGESTION_LIMIT)
    except httpx.HTTPError as exc:
        raise GeocodingError("Could not connect to the address search service.") from exc
    return [address_from_result(result) for result in results]


def locate_address(
    street: str | None, city: str | None, state: str | None, zip_code: str | None
) -> Optional[dict[str, Any]]:
    """Find the best match for a manually typed address."""

    parts = [(part or "").strip() for part in (street, city, state, zip_code)]
    query = ", ".join(part for part in parts if part)
    if not query:
        raise ValueError("Please enter an address or pincode to find on the map.")
    try:
        results = get_geocoder().search(query, limit=1)
    except httpx.HTTPError as exc:
        raise GeocodingError("Could not connect to the address search service.") from exc
    if not results:
        return None
    return address_from_result(results[0])


def reverse_lookup(lat: Any, lon: Any) -> Optional[dict[str, Any]]:
    """Resolve coordinates (e.g. a dragged map marker) into address fields."""

    latitude = _to_float(lat)
    longitude = _to_float(lon)
    if latitude is None or not -90 <= latitude <= 90:
        raise ValueError("Latitude must be between -90 and 90.")
    if longitude is None or not -180 <= longitude <= 180:
        raise ValueError("Longitude must be between -180 and 180.")
    try:
        result = get_geocoder().reverse(latitude, longitude)
    except httpx.HTTPError as exc:
        raise GeocodingError("Could not connect to the address service.") from exc
    if result is None:
        return None
    address = address_from_result(result)
    # keep the pin where the user dropped it
    address["latitude"] = latitude
    address["longitude"] = longitude
    return address
