"""Blueprint for the activity log console."""
from flask import Blueprint

bp = Blueprint(
    "activity",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
