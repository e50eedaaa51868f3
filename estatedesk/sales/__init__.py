"""Sold property history blueprint."""
from flask import Blueprint

bp = Blueprint(
    "sales",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
