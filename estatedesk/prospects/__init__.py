"""Sales prospect pipeline blueprint."""
from flask import Blueprint

bp = Blueprint(
    "prospects",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
