"""Tests for the sold-properties history and the listing pages."""

from __future__ import annotations

from decimal import Decimal

from estatedesk.auth.models import User
from estatedesk.extensions import db
from estatedesk.properties import services
from estatedesk.properties.models import Property


def _create(app, owner_id, form):
    with app.app_context():
        owner = db.session.get(User, owner_id)
        return services.create_property(owner, services.validate_property_form(form)).id


def _listed(property_form, **overrides):
    return property_form(
        status="For Sale",
        is_listed_publicly="true",
        listing_price_per_unit="1500",
        **overrides,
    )


def test_history_shows_profit_and_totals(app, auth_client, user_id, property_form):
    _create(
        app,
        user_id,
        property_form(status="Sold", sold_price="1400000", sold_date="2024-03-15"),
    )

    response = auth_client.get("/sold-properties/")

    assert response.status_code == 200
    assert "Profit/Loss</dt><dd>₹150,000.00".encode() in response.data
    assert "Total revenue: ₹1,400,000.00".encode() in response.data
    assert "Net profit/loss: ₹150,000.00".encode() in response.data


def test_unsell_returns_property_to_portfolio(app, auth_client, user_id, property_form):
    property_id = _create(
        app,
        user_id,
        property_form(status="Sold", sold_price="1400000", sold_date="2024-03-15"),
    )

    response = auth_client.post(f"/sold-properties/{property_id}/unsell")

    assert response.status_code == 302
    with app.app_context():
        record = db.session.get(Property, property_id)
        assert record.status == "Owned"
        assert record.sold_price is None
        assert record.sold_date is None
    assert b"Lakeside Plot" in auth_client.get("/properties/").data


def test_unsold_property_cannot_be_unsold(app, auth_client, user_id, property_form):
    property_id = _create(app, user_id, property_form())

    assert auth_client.post(f"/sold-properties/{property_id}/unsell").status_code == 404


def test_sold_property_can_be_deleted_permanently(app, auth_client, user_id, property_form):
    property_id = _create(
        app,
        user_id,
        property_form(status="Sold", sold_price="900000", sold_date="2024-03-15"),
    )

    auth_client.post(f"/sold-properties/{property_id}/delete")

    with app.app_context():
        assert db.session.get(Property, property_id) is None


def test_public_listing_pages_need_no_login(app, client, user_id, property_form):
    property_id = _create(app, user_id, _listed(property_form, name="Hilltop Villa"))
    _create(app, user_id, property_form(name="Private Farm"))

    index = client.get("/public-listings/")
    assert index.status_code == 200
    assert b"Hilltop Villa" in index.data
    assert b"Private Farm" not in index.data

    detail = client.get(f"/public-listings/{property_id}")
    assert detail.status_code == 200
    assert 'id="price-per-unit">₹1,500.00'.encode() in detail.data
    assert "₹1,500,000.00".encode() in detail.data


def test_unlisted_property_detail_is_not_found(app, client, user_id, property_form):
    property_id = _create(app, user_id, property_form())

    response = client.get(f"/public-listings/{property_id}")

    assert response.status_code == 404
    assert b"Not found" in response.data


def test_owner_listings_show_share_link(app, auth_client, user_id, property_form):
    _create(app, user_id, _listed(property_form, name="Hilltop Villa"))

    response = auth_client.get("/listings/")

    assert b"Hilltop Villa" in response.data
    assert b"https://estatedesk.test/public-listings/" in response.data


def test_listing_price_per_area_handles_zero_area(app, user_id):
    with app.app_context():
        record = Property(
            owner_id=user_id,
            name="Empty",
            area=Decimal("0"),
            listing_price=Decimal("1000.00"),
        )
        assert record.listing_price_per_area == Decimal("0")


def test_history_filters_by_sale_year(app, auth_client, user_id, property_form):
    _create(
        app,
        user_id,
        property_form(status="Sold", sold_price="1400000", sold_date="2023-11-02"),
    )
    _create(
        app,
        user_id,
        property_form(name="Hilltop Plot", status="Sold", sold_price="1100000", sold_date="2024-05-20"),
    )

    filtered = auth_client.get("/sold-properties/", query_string={"year": "2023"})
    everything = auth_client.get("/sold-properties/", query_string={"year": "all"})
    empty = auth_client.get("/sold-properties/", query_string={"year": "1999"})

    assert b"Lakeside Plot" in filtered.data
    assert b"Hilltop Plot" not in filtered.data
    assert "Total revenue: ₹1,400,000.00".encode() in filtered.data
    assert b'<option value="2023" selected>' in filtered.data
    assert b"Hilltop Plot" in everything.data
    assert "Total revenue: ₹2,500,000.00".encode() in everything.data
    assert everything.data.index(b'<option value="2024"') < everything.data.index(b'<option value="2023"')
    assert b"No properties were sold in 1999." in empty.data
