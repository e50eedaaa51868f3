"""Blueprint for account and display settings."""
from __future__ import annotations

from flask import Blueprint

bp = Blueprint(
    "settings",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
