from __future__ import annotations

from estatedesk.auth.models import User
from estatedesk.auth.services import verify_password
from estatedesk.extensions import db
from estatedesk.properties import services as property_services
from estatedesk.properties.models import Property, PropertyMedia
from estatedesk.models import SystemLog
from estatedesk.settings.services import convert_to_active_timezone, describe_timezone


def test_settings_page_renders(auth_client):
    """The settings page should load successfully."""

    response = auth_client.get("/settings/")

    assert response.status_code == 200
    assert b"Profile" in response.data
    assert b"Active timezone" in response.data
    assert b"India Standard Time" in response.data


def test_settings_timezone_update(auth_client, app, user_id):
    """Submitting a timezone selection should persist the change."""

    response = auth_client.post(
        "/settings/timezone", data={"timezone": "Asia/Dubai"}, follow_redirects=True
    )

    assert response.status_code == 200
    assert b"Timezone updated to Gulf Standard Time" in response.data

    with app.app_context():
        assert db.session.get(User, user_id).timezone == "Asia/Dubai"


def test_unknown_timezone_is_rejected(auth_client, app, user_id):
    response = auth_client.post("/settings/timezone", data={"timezone": "Mars/Olympus"})

    assert response.status_code == 400
    assert b"Select a timezone from the list before saving." in response.data
    with app.app_context():
        assert db.session.get(User, user_id).timezone == "Asia/Kolkata"


def test_timestamps_follow_active_timezone(app):
    from datetime import datetime

    with app.app_context():
        localized = convert_to_active_timezone(datetime(2024, 1, 1, 12, 0))
        assert localized.hour == 17
        assert localized.minute == 30
        assert describe_timezone("UTC").startswith("Coordinated Universal Time")


def test_profile_update(auth_client, app, user_id):
    response = auth_client.post(
        "/settings/",
        data={"display_name": "Asha K", "primary_number": "+91 98765 43210", "secondary_number": ""},
    )

    assert response.status_code == 302
    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.display_name == "Asha K"
        assert user.primary_number == "+91 98765 43210"
        assert user.secondary_number is None


def test_profile_requires_display_name(auth_client):
    response = auth_client.post("/settings/", data={"display_name": "  "})

    assert response.status_code == 400
    assert b"Display name is required." in response.data


def test_password_change_checks_current_password(auth_client, app, user_id):
    response = auth_client.post(
        "/settings/password",
        data={"current_password": "wrong", "new_password": "abcdef", "confirm_password": "abcdef"},
    )

    assert response.status_code == 400
    assert b"Failed to change password. Please check your current password." in response.data


def test_password_change_requires_matching_confirmation(auth_client):
    response = auth_client.post(
        "/settings/password",
        data={
            "current_password": "s3cret-pass",
            "new_password": "abcdef",
            "confirm_password": "abcdeg",
        },
    )

    assert response.status_code == 400
    assert b"Passwords do not match." in response.data


def test_password_change(auth_client, app, user_id):
    response = auth_client.post(
        "/settings/password",
        data={
            "current_password": "s3cret-pass",
            "new_password": "new-secret",
            "confirm_password": "new-secret",
        },
    )

    assert response.status_code == 302
    with app.app_context():
        user = db.session.get(User, user_id)
        assert verify_password(user, "new-secret")
        assert not verify_password(user, "s3cret-pass")


def test_delete_account_removes_portfolio(auth_client, app, user_id, property_form):
    with app.app_context():
        owner = db.session.get(User, user_id)
        record = property_services.create_property(
            owner, property_services.validate_property_form(property_form())
        )
        property_services.attach_media(record, "deed.pdf", "https://files.example.com/deed.pdf")

    response = auth_client.post(
        "/settings/delete-account", data={"confirm_email": " Owner@Example.com "}
    )

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")
    with app.app_context():
        assert db.session.get(User, user_id) is None
        assert Property.query.count() == 0
        assert PropertyMedia.query.count() == 0
        assert SystemLog.query.filter_by(user_id=user_id).count() == 0
        farewell = SystemLog.query.filter_by(action="delete-account").one()
        assert farewell.user_id is None
    assert auth_client.get("/").status_code == 302


def test_new_account_does_not_inherit_deleted_history(auth_client, app, user_id):
    auth_client.post("/settings/delete-account", data={"confirm_email": "owner@example.com"})

    auth_client.post(
        "/register",
        data={
            "email": "newcomer@example.com",
            "password": "fresh-pass",
            "confirm_password": "fresh-pass",
        },
    )
    payload = auth_client.get("/logs/feed").get_json()

    with app.app_context():
        newcomer = User.query.filter_by(email="newcomer@example.com").one()
        assert newcomer.id != user_id
    summaries = " ".join(entry["user_summary"] for entry in payload["logs"])
    assert "owner@example.com" not in summaries
    assert "newcomer@example.com" in summaries


def test_delete_account_requires_matching_email(auth_client, app, user_id):
    response = auth_client.post(
        "/settings/delete-account", data={"confirm_email": "someone@example.com"}
    )

    assert response.status_code == 400
    assert b"Type your email address exactly to confirm deletion." in response.data
    with app.app_context():
        assert db.session.get(User, user_id) is not None
    assert auth_client.get("/").status_code == 200


def test_timezone_is_chosen_per_account(app, client, user_id, other_user_id):
    client.post("/login", data={"email": "someone@example.com", "password": "s3cret-pass"})
    client.post("/settings/timezone", data={"timezone": "America/New_York"})
    client.post("/logout")

    client.post("/login", data={"email": "owner@example.com", "password": "s3cret-pass"})
    response = client.get("/settings/")

    assert b"Active timezone: India Standard Time" in response.data
    with app.app_context():
        assert db.session.get(User, other_user_id).timezone == "America/New_York"
        assert db.session.get(User, user_id).timezone == "Asia/Kolkata"


def test_converted_prospect_is_dated_in_owner_timezone(app, user_id):
    from datetime import datetime
    from zoneinfo import ZoneInfo

    from estatedesk.prospects import services as prospect_services

    with app.app_context():
        owner = db.session.get(User, user_id)
        owner.timezone = "Australia/Sydney"
        db.session.commit()
        prospect = prospect_services.create_prospect(
            owner,
            prospect_services.validate_prospect_form(
                {
                    "deal_name": "Harbour Flat",
                    "source": "Broker",
                    "estimated_value": "5000000",
                    "date_added": "2024-01-01",
                }
            ),
        )
        before = datetime.now(ZoneInfo("Australia/Sydney")).date()
        record = prospect_services.convert_prospect(prospect)
        after = datetime.now(ZoneInfo("Australia/Sydney")).date()

        assert before <= record.purchase_date <= after
