"""Address search and reverse geocoding endpoints."""
from flask import Blueprint

bp = Blueprint("geocoding", __name__)

from . import routes  # noqa: E402,F401
