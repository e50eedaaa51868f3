"""OpenStreetMap Nominatim API client."""

import logging
from typing import Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search"
REVERSE_PATH = "/reverse"


def _decode(resp: httpx.Response):
    """Parse a JSON body, treating anything else as a transport failure."""
    try:
        return resp.json()
    except ValueError as exc:
        logger.warning("Nominatim returned a non-JSON body (%s)", resp.headers.get("content-type"))
        raise httpx.DecodingError("Invalid JSON from geocoder", request=resp.request) from exc


class NominatimClient:
    """Thin wrapper around the Nominatim search and reverse endpoints."""

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        country_codes: str = "in",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not user_agent:
            raise ValueError("Nominatim requires an identifying User-Agent.")
        self.country_codes = country_codes
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            transport=transport,
        )

    def search(self, query: str, limit: int = 5) -> List[Dict]:
        """Forward geocode free text. Returns raw results with address details."""
        params = {
            "q": query,
            "format": "json",
            "addressdetails": 1,
            "limit": limit,
        }
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        resp = self.client.get(SEARCH_PATH, params=params)
        if resp.status_code == 429:
            logger.warning("Nominatim rate limit hit (429) for search")
        resp.raise_for_status()
        data = _decode(resp)
        return data if isinstance(data, list) else []

    def reverse(self, lat: float, lon: float) -> Optional[Dict]:
        """Reverse geocode a coordinate. Returns raw result or None."""
        resp = self.client.get(
            REVERSE_PATH,
            params={"lat": lat, "lon": lon, "format": "json", "addressdetails": 1},
        )
        if resp.status_code == 429:
            logger.warning("Nominatim rate limit hit (429) for reverse")
        resp.raise_for_status()
        data = _decode(resp)
        # Nominatim answers 200 with {"error": "Unable to geocode"} for open water etc.
        if not isinstance(data, dict) or "error" in data or not data.get("address"):
            return None
        return data

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
