"""Tests for dashboard KPIs and recent activity."""

from __future__ import annotations

from estatedesk.auth.models import User
from estatedesk.extensions import db
from estatedesk.properties import services as property_services
from estatedesk.prospects import services as prospect_services


def _seed(app, owner_id, property_form):
    with app.app_context():
        owner = db.session.get(User, owner_id)
        for name, purchase_date, extra in [
            ("Oldest Plot", "2020-01-01", {}),
            ("Middle Flat", "2021-06-01", {"property_type": "Flat", "price_per_unit": "5000"}),
            ("Newer Villa", "2022-01-01", {"property_type": "Villa"}),
            ("Newest Shop", "2023-09-01", {}),
            ("Recent Farm", "2023-10-01", {}),
            (
                "Sold Acre",
                "2019-01-01",
                {"status": "Sold", "sold_price": "2000000", "sold_date": "2024-02-01"},
            ),
        ]:
            form = property_form(name=name, purchase_date=purchase_date, **extra)
            property_services.create_property(
                owner, property_services.validate_property_form(form)
            )

        for deal, status in [("Deal One", "New"), ("Deal Two", "New"), ("Deal Three", "New")]:
            prospect_services.create_prospect(
                owner,
                prospect_services.validate_prospect_form(
                    {
                        "deal_name": deal,
                        "source": "Walk-in",
                        "estimated_value": "100000",
                        "date_added": "2024-01-01",
                        "status": status,
                    }
                ),
            )
        prospect = prospect_services.fetch_prospects(owner)[0]
        prospect_services.convert_prospect(prospect)


def test_summary_counts_active_records(app, auth_client, user_id, property_form):
    _seed(app, user_id, property_form)

    payload = auth_client.get("/api/summary").get_json()

    assert payload["success"] is True
    # five active plus the converted prospect's property
    assert payload["total_properties"] == 6
    assert payload["active_prospects"] == 2
    # 4 x 1,250,000 + 5,000,000, converted property is worth nothing yet
    assert payload["portfolio_value"] == 10000000.0
    assert payload["portfolio_value_display"] == "₹1.00 Cr"


def test_recent_activity_uses_sold_date_for_sold_properties(
    app, auth_client, user_id, property_form
):
    _seed(app, user_id, property_form)

    recent = auth_client.get("/api/summary").get_json()["recent_activity"]

    assert len(recent) == 5
    # the converted property is dated today, so it leads
    assert [item["name"] for item in recent[1:]] == [
        "Sold Acre",
        "Recent Farm",
        "Newest Shop",
        "Newer Villa",
    ]
    assert recent[1]["date"] == "2024-02-01"


def test_dashboard_page_shows_kpis(auth_client):
    response = auth_client.get("/")

    assert response.status_code == 200
    for label in (b"Total Properties", b"Active Prospects", b"Portfolio Value"):
        assert label in response.data
    assert "₹0.00 Cr".encode() in response.data
    assert b"No recent activity." in response.data


def test_summary_requires_sign_in(client):
    assert client.get("/api/summary").status_code == 401


def test_map_markers_cover_properties_with_coordinates(app, auth_client, user_id, property_form):
    _seed(app, user_id, property_form)

    markers = auth_client.get("/api/summary").get_json()["map_markers"]

    # the converted prospect's property has no coordinates yet
    assert [marker["name"] for marker in markers] == [
        "Oldest Plot",
        "Middle Flat",
        "Newer Villa",
        "Newest Shop",
        "Recent Farm",
        "Sold Acre",
    ]
    assert markers[-1]["status"] == "Sold"
    assert markers[0]["latitude"] == 18.5204
    assert markers[0]["longitude"] == 73.8567
    assert b"data-markers=" in auth_client.get("/").data
