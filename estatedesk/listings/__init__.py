"""Owner and public listing pages."""
from flask import Blueprint

bp = Blueprint(
    "listings",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
