"""Validation, price derivation and persistence helpers for properties."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import PurePosixPath
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from ..auth.models import User
from ..extensions import db
from .models import (
    AREA_UNITS,
    LAND_TYPES,
    PROPERTY_STATUSES,
    PROPERTY_TYPES,
    STATUS_FOR_SALE,
    STATUS_OWNED,
    STATUS_SOLD,
    Property,
    PropertyMedia,
)

ZERO = Decimal("0.00")
MIN_AREA = Decimal("0.0001")
CRORE = Decimal("10000000")
ZIP_LENGTH = 6

# Largest values the Numeric columns can hold.
MAX_AMOUNT = Decimal("99999999999999.99")
MAX_UNIT_PRICE = Decimal("999999999999.99")
MAX_AREA = Decimal("9999999999.9999")

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg", ".heic"}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".webm", ".mkv", ".avi"}


class PropertyValidationError(ValueError):
    """Raised when submitted property data fails validation."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = errors


def quantize_amount(value: Decimal | float | int | str) -> Decimal:
    """Normalize values to two decimal places."""

    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, TypeError) as exc:
            raise ValueError("Invalid numeric value") from exc
    try:
        return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError("Numeric value is too large") from exc


def decimal_to_number(value: Decimal | float | int | None) -> Optional[float]:
    """Convert decimals to floats for JSON serialization."""

    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    return float(value)


def format_currency(amount: Decimal | float | int | str | None) -> str:
    """Return a rupee formatted string for display content."""

    if amount is None:
        return "—"
    quantized = quantize_amount(amount)
    sign = "-" if quantized < 0 else ""
    return f"{sign}₹{abs(quantized):,.2f}"


def format_crore(amount: Decimal | float | int | str) -> str:
    """Express a rupee amount in crore, e.g. ``₹1.25 Cr``."""

    crores = quantize_amount(amount) / CRORE
    return f"₹{crores.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)} Cr"


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(data: Mapping[str, Any], key: str) -> Optional[str]:
    return _text(data, key) or None


def parse_decimal(raw: Any) -> Optional[Decimal]:
    """Parse a user supplied number, returning ``None`` for blanks."""

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise ValueError("Invalid numeric value")
    try:
        value = Decimal(str(raw).strip().replace(",", ""))
    except InvalidOperation as exc:
        raise ValueError("Invalid numeric value") from exc
    if not value.is_finite():
        raise ValueError("Invalid numeric value")
    return value


def parse_date(raw: Any) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` date, returning ``None`` for blanks."""

    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip()[:10])
    except ValueError as exc:
        raise ValueError("Invalid date") from exc


def parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() in {"1", "true", "on", "yes"}


def _parse_coordinate(
    data: Mapping[str, Any], key: str, limit: int, errors: dict[str, str]
) -> Optional[float]:
    try:
        value = parse_decimal(data.get(key))
    except ValueError:
        errors[key] = f"{key.capitalize()} must be a number."
        return None
    if value is None:
        return None
    if not -limit <= value <= limit:
        errors[key] = f"{key.capitalize()} must be between -{limit} and {limit}."
        return None
    return float(value)


def _parse_amount(
    data: Mapping[str, Any],
    key: str,
    message: str,
    errors: dict[str, str],
    maximum: Decimal = MAX_UNIT_PRICE,
) -> Optional[Decimal]:
    try:
        value = parse_decimal(data.get(key))
    except ValueError:
        errors[key] = message
        return None
    if value is not None and abs(value) > maximum:
        errors[key] = f"Must be at most {maximum:,}."
        return None
    return value


def validate_property_form(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a property submission and return cleaned values.

    Accepts either form data or a JSON object using the same field names.
    All problems are collected and raised together as a
    :class:`PropertyValidationError` keyed by field name.
    """

    errors: dict[str, str] = {}
    cleaned: dict[str, Any] = {}

    name = _text(data, "name")
    if len(name) < 3:
        errors["name"] = "Property name must be at least 3 characters."
    cleaned["name"] = name

    street = _text(data, "street")
    city = _text(data, "city")
    state = _text(data, "state")
    zip_code = _text(data, "zip")
    if not street:
        errors["street"] = "Area/Locality is required."
    if not city:
        errors["city"] = "City is required."
    if not state:
        errors["state"] = "State is required."
    if len(zip_code) != ZIP_LENGTH:
        errors["zip"] = "A 6-digit zip code is required."
    cleaned.update(
        street=street,
        city=city,
        state=state,
        zip_code=zip_code,
        landmark=_optional_text(data, "landmark"),
        latitude=_parse_coordinate(data, "latitude", 90, errors),
        longitude=_parse_coordinate(data, "longitude", 180, errors),
    )

    area = _parse_amount(data, "area", "Area must be a number.", errors, MAX_AREA)
    if "area" not in errors and (area is None or area < MIN_AREA):
        errors["area"] = "Land area must be greater than 0."
    area_unit = _text(data, "area_unit")
    if area_unit not in AREA_UNITS:
        errors["area_unit"] = "Please select a unit."
    cleaned.update(
        area=area,
        area_unit=area_unit,
        khasra_number=_optional_text(data, "khasra_number"),
        landbook_number=_optional_text(data, "landbook_number"),
    )

    property_type = _text(data, "property_type")
    if property_type not in PROPERTY_TYPES:
        errors["property_type"] = "Please select a property type."
    land_type = _optional_text(data, "land_type")
    if land_type is not None and land_type not in LAND_TYPES:
        errors["land_type"] = "Please select a valid land type."
    cleaned.update(
        property_type=property_type,
        land_type=land_type,
        is_diverted=parse_bool(data.get("is_diverted")),
    )

    try:
        purchase_date = parse_date(data.get("purchase_date"))
    except ValueError:
        purchase_date = None
    if purchase_date is None:
        errors["purchase_date"] = "A purchase date is required."
    cleaned["purchase_date"] = purchase_date

    price_per_unit = _parse_amount(data, "price_per_unit", "Price must be a number.", errors)
    if "price_per_unit" not in errors and (price_per_unit is None or price_per_unit <= 0):
        errors["price_per_unit"] = "Price per unit must be a positive number."
    cleaned["price_per_unit"] = price_per_unit
    cleaned["remarks"] = _optional_text(data, "remarks")

    status = _text(data, "status") or STATUS_OWNED
    if status not in PROPERTY_STATUSES:
        errors["status"] = "Please select a valid status."
    is_listed = parse_bool(data.get("is_listed_publicly"))
    cleaned.update(status=status, is_listed_publicly=is_listed)

    listing_ppu = _parse_amount(
        data, "listing_price_per_unit", "Listing price must be a number.", errors
    )
    if listing_ppu is not None and listing_ppu <= 0:
        errors["listing_price_per_unit"] = "Listing price per unit must be a positive number."
    if status == STATUS_FOR_SALE and is_listed and "listing_price_per_unit" not in errors:
        if listing_ppu is None:
            errors["listing_price_per_unit"] = (
                "Listing price per unit is required when property is listed publicly."
            )
    cleaned["listing_price_per_unit"] = listing_ppu

    sold_price = _parse_amount(
        data, "sold_price", "Sold price must be a number.", errors, MAX_AMOUNT
    )
    if sold_price is not None and sold_price <= 0 and "sold_price" not in errors:
        errors["sold_price"] = "A valid sold price is required."
    try:
        sold_date = parse_date(data.get("sold_date"))
    except ValueError:
        sold_date = None
        errors["sold_date"] = "A sold date is required."
    if status == STATUS_SOLD:
        if sold_price is None and "sold_price" not in errors:
            errors["sold_price"] = "A valid sold price is required."
        if sold_date is None:
            errors["sold_date"] = "A sold date is required."
    cleaned.update(sold_price=sold_price, sold_date=sold_date)

    if area is not None and "area" not in errors:
        if price_per_unit is not None and area * price_per_unit > MAX_AMOUNT:
            errors.setdefault("price_per_unit", "Total purchase price is too large.")
        if listing_ppu is not None and area * listing_ppu > MAX_AMOUNT:
            errors.setdefault("listing_price_per_unit", "Total listing price is too large.")

    if errors:
        raise PropertyValidationError(errors)
    return cleaned


def derive_prices(
    area: Decimal | None,
    price_per_unit: Decimal | None,
    listing_price_per_unit: Decimal | None = None,
) -> tuple[Decimal, Optional[Decimal]]:
    """Return ``(purchase_price, listing_price)`` for the given land area.

    The listing price is ``None`` when it would not be positive.
    """

    area = area or Decimal("0")
    purchase_price = quantize_amount(area * (price_per_unit or Decimal("0")))
    listing_value = area * (listing_price_per_unit or Decimal("0"))
    listing_price = quantize_amount(listing_value) if listing_value > 0 else None
    return purchase_price, listing_price


def apply_property_fields(record: Property, cleaned: Mapping[str, Any]) -> Property:
    """Copy validated values onto ``record`` and normalize status-dependent fields."""

    for field in (
        "name",
        "street",
        "city",
        "state",
        "zip_code",
        "landmark",
        "latitude",
        "longitude",
        "area",
        "area_unit",
        "khasra_number",
        "landbook_number",
        "property_type",
        "purchase_date",
        "price_per_unit",
        "remarks",
        "status",
    ):
        setattr(record, field, cleaned[field])

    purchase_price, listing_price = derive_prices(
        cleaned["area"], cleaned["price_per_unit"], cleaned.get("listing_price_per_unit")
    )
    record.purchase_price = purchase_price

    if cleaned["property_type"] == "Open Land":
        record.land_type = cleaned.get("land_type")
        record.is_diverted = bool(cleaned.get("is_diverted"))
    else:
        record.land_type = None
        record.is_diverted = None

    status = cleaned["status"]
    if status == STATUS_SOLD:
        record.is_listed_publicly = False
        record.listing_price = None
        record.listing_price_per_unit = None
        record.sold_price = quantize_amount(cleaned["sold_price"])
        record.sold_date = cleaned["sold_date"]
    elif status == STATUS_FOR_SALE:
        record.sold_price = None
        record.sold_date = None
        record.is_listed_publicly = bool(cleaned.get("is_listed_publicly"))
        if record.is_listed_publicly:
            record.listing_price_per_unit = cleaned.get("listing_price_per_unit")
            record.listing_price = listing_price
        else:
            record.listing_price_per_unit = None
            record.listing_price = None
    else:
        record.is_listed_publicly = False
        record.listing_price = None
        record.listing_price_per_unit = None
        record.sold_price = None
        record.sold_date = None
    return record


def create_property(owner: User, cleaned: Mapping[str, Any]) -> Property:
    """Persist a new property for ``owner`` from validated form values."""

    record = Property(owner_id=owner.id)
    apply_property_fields(record, cleaned)
    db.session.add(record)
    db.session.commit()
    return record


def update_property(record: Property, cleaned: Mapping[str, Any]) -> Property:
    apply_property_fields(record, cleaned)
    db.session.add(record)
    db.session.commit()
    return record


def delete_property(record: Property) -> None:
    db.session.delete(record)
    db.session.commit()


def suggested_sale_price(record: Property) -> Decimal:
    """Price offered by default when marking a property as sold."""

    return quantize_amount(record.listing_price or record.purchase_price or ZERO)


def mark_property_sold(record: Property, sold_price: Any, sold_date: Any) -> Property:
    """Record a completed sale and withdraw any public listing."""

    errors: dict[str, str] = {}
    try:
        price = parse_decimal(sold_price)
    except ValueError:
        price = None
    if price is None or price < 1:
        errors["sold_price"] = "Sold price is required."
    elif price > MAX_AMOUNT:
        errors["sold_price"] = f"Must be at most {MAX_AMOUNT:,}."
    try:
        when = parse_date(sold_date)
    except ValueError:
        when = None
    if when is None:
        errors["sold_date"] = "A sold date is required."
    if errors:
        raise PropertyValidationError(errors)

    record.status = STATUS_SOLD
    record.sold_price = quantize_amount(price)
    record.sold_date = when
    record.is_listed_publicly = False
    record.listing_price = None
    record.listing_price_per_unit = None
    db.session.add(record)
    db.session.commit()
    return record


def find_owned_property(owner: User, property_id: int) -> Optional[Property]:
    """Return the property only when ``owner`` holds it."""

    return Property.query.filter_by(id=property_id, owner_id=owner.id).first()


def fetch_properties(owner: User) -> list[Property]:
    return Property.query.filter_by(owner_id=owner.id).order_by(Property.created_at.desc()).all()


def fetch_active_properties(owner: User) -> list[Property]:
    """Return properties that are still held (owned or for sale)."""

    return (
        Property.query.filter_by(owner_id=owner.id)
        .filter(Property.status != STATUS_SOLD)
        .order_by(Property.created_at.desc(), Property.id.desc())
        .all()
    )


def infer_media_kind(file_name: str) -> str:
    suffix = PurePosixPath(file_name.lower()).suffix
    if suffix in IMAGE_EXTENSIONS:
        return "image"
    if suffix in VIDEO_EXTENSIONS:
        return "video"
    return "document"


def attach_media(record: Property, file_name: str, url: str) -> PropertyMedia:
    """Link an already hosted file to ``record``."""

    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise PropertyValidationError({"url": "Provide an http(s) link to the file."})
    file_name = (file_name or "").strip() or PurePosixPath(parsed.path).name
    if not file_name:
        raise PropertyValidationError({"file_name": "A file name is required."})

    kind = infer_media_kind(file_name)
    if kind == "document":
        kind = infer_media_kind(parsed.path)

    media = PropertyMedia(property=record, file_name=file_name, url=url, kind=kind)
    db.session.add(media)
    db.session.commit()
    return media


def remove_media(media: PropertyMedia) -> None:
    db.session.delete(media)
    db.session.commit()


def form_values(record: Property | None = None) -> dict[str, Any]:
    """Return the values used to prefill the property form."""

    if record is None:
        return {
            "status": STATUS_OWNED,
            "area_unit": AREA_UNITS[0],
            "property_type": PROPERTY_TYPES[0],
            "is_listed_publicly": False,
            "is_diverted": False,
        }
    return {
        "name": record.name,
        "street": record.street,
        "city": record.city,
        "state": record.state,
        "zip": record.zip_code,
        "landmark": record.landmark or "",
        "latitude": "" if record.latitude is None else record.latitude,
        "longitude": "" if record.longitude is None else record.longitude,
        "area": record.area,
        "area_unit": record.area_unit,
        "khasra_number": record.khasra_number or "",
        "landbook_number": record.landbook_number or "",
        "property_type": record.property_type,
        "land_type": record.land_type or "",
        "is_diverted": bool(record.is_diverted),
        "purchase_date": record.purchase_date.isoformat() if record.purchase_date else "",
        "price_per_unit": record.price_per_unit if record.price_per_unit is not None else "",
        "remarks": record.remarks or "",
        "status": record.status,
        "is_listed_publicly": record.is_listed_publicly,
        "listing_price_per_unit": record.listing_price_per_unit or "",
        "sold_price": record.sold_price or "",
        "sold_date": record.sold_date.isoformat() if record.sold_date else "",
    }


def serialize_property(record: Property) -> dict[str, Any]:
    """Return a JSON-ready representation of a property."""

    return {
        "id": record.id,
        "name": record.name,
        "address": {
            "street": record.street,
            "city": record.city,
            "state": record.state,
            "zip": record.zip_code,
            "landmark": record.landmark,
            "latitude": record.latitude,
            "longitude": record.longitude,
        },
        "land_details": {
            "area": float(record.area or 0),
            "area_unit": record.area_unit,
            "khasra_number": record.khasra_number,
            "landbook_number": record.landbook_number,
        },
        "property_type": record.property_type,
        "land_type": record.land_type,
        "is_diverted": record.is_diverted,
        "purchase_date": record.purchase_date.isoformat() if record.purchase_date else None,
        "price_per_unit": decimal_to_number(record.price_per_unit),
        "purchase_price": decimal_to_number(record.purchase_price),
        "remarks": record.remarks,
        "status": record.status,
        "is_listed_publicly": record.is_listed_publicly,
        "listing_price_per_unit": decimal_to_number(record.listing_price_per_unit),
        "listing_price": decimal_to_number(record.listing_price),
        "sold_price": decimal_to_number(record.sold_price),
        "sold_date": record.sold_date.isoformat() if record.sold_date else None,
        "profit_loss": decimal_to_number(record.profit_loss),
        "media": [
            {"id": item.id, "file_name": item.file_name, "url": item.url, "kind": item.kind}
            for item in record.media
        ],
    }
