import pytest

from woofeed.sync.static_values import validate_static_value, validation_info
from woofeed.sync.validators import validate_date_range


@pytest.mark.parametrize("attribute,value", [
    ("condition", "used"),
    ("condition", "Refurbished"),
    ("video_link", "https://youtu.be/12345"),
    ("price", "79.99 USD"),
    ("return_window", "30"),
    ("popularity_score", "4.5"),
    ("availability_date", "2025-12-01"),
    ("sale_price_effective_date", "2025-07-01 / 2025-07-15"),
    ("length", "10 mm"),
    ("gtin", "4006381333931"),
    ("mpn", "AB-12_3"),
    ("gender", ""),
])
def test_accepts(attribute, value):
    assert validate_static_value(attribute, value).is_valid is True


@pytest.mark.parametrize("attribute,value,error", [
    ("condition", "broken", "Must be one of: new, refurbished, used"),
    ("video_link", "ftp://example.com/v", "Invalid URL format (must use http or https)"),
    ("price", "79.99", 'Must be in format "79.99 USD" (number + ISO 4217 currency code)'),
    ("return_window", "3.5", "Must be a whole number"),
    ("popularity_score", "high", "Must be a valid number"),
    ("availability_date", "12/01/2025", "Must be in ISO 8601 format (YYYY-MM-DD)"),
    ("sale_price_effective_date", "2025-07-15 / 2025-07-01", "Start date must be before end date"),
    ("sale_price_effective_date", "2025-07-15 / 2025-07-15", "Start date must be before end date"),
    ("sale_price_effective_date", "2025-07-15", 'Must be in format "YYYY-MM-DD / YYYY-MM-DD"'),
    ("length", "10mm", 'Must be in format "10 mm" (number + unit)'),
    ("color", "x" * 41, "Maximum 40 characters allowed"),
    ("gtin", "1234", "GTIN must be 8-14 digits"),
    ("mpn", "AB#1", "Must be alphanumeric (letters, numbers, dashes, underscores only)"),
    ("material", "  ", "This field is required"),
    ("no_such_field", "x", "Unknown field attribute"),
])
def test_rejects(attribute, value, error):
    result = validate_static_value(attribute, value)
    assert result.is_valid is False
    assert result.error == error


@pytest.mark.parametrize("value", ["2025-07-01 / 2025-07-15", "2025-07-15 / 2025-07-15", "2025-07-15 / 2025-07-01"])
def test_date_range_agrees_with_feed_validation(value):
    assert validate_static_value("sale_price_effective_date", value).is_valid == validate_date_range(value, "d").valid

def test_validation_info():
    info = validation_info("price")
    assert info["data_type"] == "Number + currency"
    assert info["example"]
    assert validation_info("nope") is None
