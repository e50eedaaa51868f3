"""Configuration settings for EstateDesk."""
from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """Base configuration class."""

    SECRET_KEY = os.environ.get("ESTATEDESK_SECRET_KEY", "estatedesk-dev-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "ESTATEDESK_DATABASE_URI", f"sqlite:///{BASE_DIR / 'estatedesk.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ENVIRONMENT = os.environ.get("ESTATEDESK_ENV", "development")
    LOG_RETENTION = int(os.environ.get("ESTATEDESK_LOG_RETENTION", 200))

    GEOCODER_URL = os.environ.get(
        "ESTATEDESK_GEOCODER_URL", "https://nominatim.openstreetmap.org"
    )
    GEOCODER_COUNTRY = os.environ.get("ESTATEDESK_GEOCODER_COUNTRY", "in")
    GEOCODER_USER_AGENT = os.environ.get(
        "ESTATEDESK_GEOCODER_USER_AGENT", "EstateDesk/1.0 (portfolio manager)"
    )
    GEOCODER_TIMEOUT = float(os.environ.get("ESTATEDESK_GEOCODER_TIMEOUT", 10))

    # Used to build the shareable link for the public listings page.
    PUBLIC_BASE_URL = os.environ.get("ESTATEDESK_PUBLIC_BASE_URL", "")
