"""Unit tests for property validation, derivations and status rules."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from estatedesk.auth.models import User
from estatedesk.extensions import db
from estatedesk.properties import services
from estatedesk.properties.models import Property


def test_validation_reports_every_invalid_field(property_form):
    """Problems are collected per field rather than stopping at the first."""

    data = property_form(name="ab", zip="4110", area="0", price_per_unit="-5", latitude="91")

    with pytest.raises(services.PropertyValidationError) as excinfo:
        services.validate_property_form(data)

    errors = excinfo.value.errors
    assert errors["name"] == "Property name must be at least 3 characters."
    assert errors["zip"] == "A 6-digit zip code is required."
    assert errors["area"] == "Land area must be greater than 0."
    assert errors["price_per_unit"] == "Price per unit must be a positive number."
    assert "latitude" in errors


def test_listed_for_sale_property_requires_listing_price(property_form):
    data = property_form(status="For Sale", is_listed_publicly="true")

    with pytest.raises(services.PropertyValidationError) as excinfo:
        services.validate_property_form(data)

    assert excinfo.value.errors == {
        "listing_price_per_unit": "Listing price per unit is required when property is listed publicly."
    }


def test_sold_property_requires_price_and_date(property_form):
    with pytest.raises(services.PropertyValidationError) as excinfo:
        services.validate_property_form(property_form(status="Sold"))

    assert set(excinfo.value.errors) == {"sold_price", "sold_date"}


def test_derive_prices_multiplies_area_by_unit_prices():
    purchase, listing = services.derive_prices(Decimal("2.5"), Decimal("400000"), Decimal("520000"))

    assert purchase == Decimal("1000000.00")
    assert listing == Decimal("1300000.00")


def test_derive_prices_omits_listing_price_without_unit_price():
    purchase, listing = services.derive_prices(Decimal("10"), Decimal("3"), None)

    assert purchase == Decimal("30.00")
    assert listing is None


def test_owned_status_clears_listing_and_sale_fields(property_form):
    cleaned = services.validate_property_form(
        property_form(listing_price_per_unit="1500", is_listed_publicly="true", sold_price="9")
    )
    record = services.apply_property_fields(Property(owner_id=1), cleaned)

    assert record.purchase_price == Decimal("1250000.00")
    assert record.is_listed_publicly is False
    assert record.listing_price is None
    assert record.listing_price_per_unit is None
    assert record.sold_price is None
    assert record.sold_date is None


def test_for_sale_listing_keeps_listing_prices(property_form):
    cleaned = services.validate_property_form(
        property_form(status="For Sale", is_listed_publicly="on", listing_price_per_unit="1500")
    )
    record = services.apply_property_fields(Property(owner_id=1), cleaned)

    assert record.is_listed_publicly is True
    assert record.listing_price_per_unit == Decimal("1500")
    assert record.listing_price == Decimal("1500000.00")
    assert record.listing_price_per_area == Decimal("1500")


def test_unlisted_for_sale_property_drops_listing_prices(property_form):
    cleaned = services.validate_property_form(
        property_form(status="For Sale", listing_price_per_unit="1500")
    )
    record = services.apply_property_fields(Property(owner_id=1), cleaned)

    assert record.is_listed_publicly is False
    assert record.listing_price is None


def test_sold_status_withdraws_listing_and_reports_profit(property_form):
    cleaned = services.validate_property_form(
        property_form(status="Sold", sold_price="1400000", sold_date="2024-06-30", is_listed_publicly="true")
    )
    record = services.apply_property_fields(Property(owner_id=1), cleaned)

    assert record.is_listed_publicly is False
    assert record.sold_date == date(2024, 6, 30)
    assert record.profit_loss == Decimal("150000.00")


def test_land_type_only_kept_for_open_land(property_form):
    cleaned = services.validate_property_form(property_form(property_type="Flat"))
    record = services.apply_property_fields(Property(owner_id=1), cleaned)

    assert record.land_type is None
    assert record.is_diverted is None


def test_mark_property_sold_persists_sale(app, user_id, property_form):
    with app.app_context():
        owner = db.session.get(User, user_id)
        cleaned = services.validate_property_form(
            property_form(status="For Sale", is_listed_publicly="true", listing_price_per_unit="1300")
        )
        record = services.create_property(owner, cleaned)

        assert services.suggested_sale_price(record) == Decimal("1300000.00")

        services.mark_property_sold(record, "1200000", "2024-01-15")

        stored = db.session.get(Property, record.id)
        assert stored.status == "Sold"
        assert stored.sold_price == Decimal("1200000.00")
        assert stored.is_listed_publicly is False
        assert stored.listing_price is None
        assert stored.profit_loss == Decimal("-50000.00")


def test_mark_property_sold_rejects_missing_values(app, user_id, property_form):
    with app.app_context():
        owner = db.session.get(User, user_id)
        record = services.create_property(owner, services.validate_property_form(property_form()))

        with pytest.raises(services.PropertyValidationError) as excinfo:
            services.mark_property_sold(record, "0", "")

        assert set(excinfo.value.errors) == {"sold_price", "sold_date"}
        assert db.session.get(Property, record.id).status == "Owned"


def test_attach_media_infers_kind_and_rejects_bad_links(app, user_id, property_form):
    with app.app_context():
        owner = db.session.get(User, user_id)
        record = services.create_property(owner, services.validate_property_form(property_form()))

        photo = services.attach_media(record, "", "https://cdn.example.com/plots/front.JPG")
        video = services.attach_media(record, "walkthrough.mp4", "https://cdn.example.com/v/123")
        deed = services.attach_media(record, "sale-deed.pdf", "https://cdn.example.com/d/9")

        assert (photo.file_name, photo.kind) == ("front.JPG", "image")
        assert video.kind == "video"
        assert deed.kind == "document"

        with pytest.raises(services.PropertyValidationError):
            services.attach_media(record, "x.png", "ftp://example.com/x.png")


def test_format_helpers():
    assert services.format_currency(Decimal("1234567.5")) == "₹1,234,567.50"
    assert services.format_currency(Decimal("-250")) == "-₹250.00"
    assert services.format_crore(Decimal("12500000")) == "₹1.25 Cr"


def test_amounts_beyond_column_precision_are_rejected(property_form):
    with pytest.raises(services.PropertyValidationError) as excinfo:
        services.validate_property_form(
            property_form(area="99999999999", status="For Sale", listing_price_per_unit="5e20")
        )

    assert excinfo.value.errors["area"] == "Must be at most 9,999,999,999.9999."
    assert excinfo.value.errors["listing_price_per_unit"] == "Must be at most 999,999,999,999.99."


def test_listing_total_overflow_is_reported(property_form):
    with pytest.raises(services.PropertyValidationError) as excinfo:
        services.validate_property_form(
            property_form(area="500000000", status="For Sale", listing_price_per_unit="900000000")
        )

    assert excinfo.value.errors == {"listing_price_per_unit": "Total listing price is too large."}


def test_quantize_amount_rejects_unrepresentable_values():
    with pytest.raises(ValueError, match="too large"):
        services.quantize_amount(Decimal("1e30"))
