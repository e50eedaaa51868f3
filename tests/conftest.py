from __future__ import annotations

from pathlib import Path
import sys

import pytest
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from estatedesk import create_app
from estatedesk.auth.services import register_user
from estatedesk.config import Config
from estatedesk.extensions import db

PASSWORD = "s3cret-pass"


class TestingConfig(Config):
    """Configuration tuned for isolated unit tests."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
    GEOCODER_URL = "https://geocoder.test"
    PUBLIC_BASE_URL = "https://estatedesk.test"


@pytest.fixture()
def app():
    """Create a Flask app instance backed by an in-memory database."""

    application = create_app(TestingConfig)
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    """Provide a Flask test client for request assertions."""

    return app.test_client()


@pytest.fixture()
def user_id(app):
    """Register the default account and return its id."""

    with app.app_context():
        return register_user("owner@example.com", PASSWORD, "Asha Owner").id


@pytest.fixture()
def other_user_id(app):
    with app.app_context():
        return register_user("someone@example.com", PASSWORD, "Someone Else").id


@pytest.fixture()
def auth_client(client, user_id):
    """A test client signed in as the default account."""

    response = client.post("/login", data={"email": "owner@example.com", "password": PASSWORD})
    assert response.status_code == 302
    return client


@pytest.fixture()
def property_form():
    """Factory for a valid property submission with optional overrides."""

    def build(**overrides):
        data = {
            "name": "Lakeside Plot",
            "street": "MG Road",
            "city": "Pune",
            "state": "Maharashtra",
            "zip": "411001",
            "landmark": "Near the lake",
            "latitude": "18.5204",
            "longitude": "73.8567",
            "area": "1000",
            "area_unit": "Square Feet",
            "khasra_number": "KH-12",
            "landbook_number": "",
            "property_type": "Open Land",
            "land_type": "Residential",
            "is_diverted": "true",
            "purchase_date": "2023-04-01",
            "price_per_unit": "1250",
            "remarks": "",
            "status": "Owned",
        }
        data.update(overrides)
        return data

    return build
