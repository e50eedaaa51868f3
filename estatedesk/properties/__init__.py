"""Property portfolio blueprint."""
from flask import Blueprint

bp = Blueprint(
    "properties",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
