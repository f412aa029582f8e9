#===========================================================================
# woofeed/sync/validators.py
# Format checks for individual feed attribute values.
# A check returns FormatCheck(valid, message); a valid check may still carry
# an advisory message (e.g. http instead of https).
#===========================================================================
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable
from urllib.parse import urlparse

from woofeed.sync.components.util import coerce_float, is_empty


@dataclass(frozen=True)
class FormatCheck:
    valid: bool
    message: str | None = None


OK = FormatCheck(True)

VALID_CURRENCIES = frozenset({
    "USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CNY", "INR", "BRL", "MXN",
    "CHF", "SEK", "NOK", "DKK", "PLN", "CZK", "HUF", "RON", "BGN", "HRK",
    "RUB", "TRY", "ZAR", "NZD", "SGD", "HKD", "KRW", "THB", "MYR", "IDR",
    "PHP", "VND", "AED", "SAR", "EGP", "NGN", "KES", "GHS", "MAD", "TND",
})
AVAILABILITY_VALUES = ("in_stock", "out_of_stock", "preorder")
CONDITION_VALUES = ("new", "refurbished", "used")

PRICE_RE = re.compile(r"^\d+(\.\d{2})?\s[A-Z]{3}$")
GTIN_RE = re.compile(r"^\d{8,14}$")
DIMENSIONS_RE = re.compile(r"^\d+\.?\d*x\d+\.?\d*x\d+\.?\d*\s\w+$")
NUMBER_UNIT_RE = re.compile(r"^\d+\.?\d*\s\w+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

STRING_LIMITS = {
    "id": 100,
    "title": 150,
    "description": 5000,
    "brand": 70,
    "seller_name": 70,
    "mpn": 70,
    "item_group_id": 70,
    "color": 40,
    "size": 20,
    "material": 100,
}


def validate_price(value: Any) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, "Price must be a string")
    if not PRICE_RE.match(value):
        return FormatCheck(False, f'Invalid price format: "{value}". Expected format: "XX.XX CCC" (e.g., "79.99 USD")')
    currency = value.split(" ")[1]
    if currency not in VALID_CURRENCIES:
        return FormatCheck(False, f'Invalid currency code: "{currency}". Must be valid ISO 4217 code (e.g., USD, EUR, GBP)')
    return OK


def validate_gtin(value: Any) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, "GTIN must be a string")
    if not GTIN_RE.match(value.strip()):
        return FormatCheck(False, f'Invalid GTIN: "{value}". Must be 8-14 digits with no dashes or spaces')
    return OK


def validate_url(value: Any, field: str) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, f"{field} must be a string")
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        if parsed.scheme and parsed.netloc:
            return FormatCheck(False, f"{field} must use HTTP or HTTPS protocol")
        return FormatCheck(False, f'Invalid URL format for {field}: "{value}"')
    if parsed.scheme == "http":
        return FormatCheck(True, f"{field} uses HTTP. HTTPS is preferred for security")
    return OK


def validate_url_list(value: Any, field: str) -> FormatCheck:
    if not isinstance(value, list):
        return FormatCheck(False, f"{field} must be an array")
    for url in value:
        check = validate_url(url, field)
        if not check.valid:
            return check
    return OK


def validate_category_path(value: Any) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, "Category path must be a string")
    if " > " not in value:
        return FormatCheck(
            False,
            f'Invalid category format: "{value}". Must use " > " separator (e.g., "Apparel > Shoes > Sneakers")',
        )
    if " / " in value or " | " in value or "," in value:
        return FormatCheck(False, f'Invalid separator in category: "{value}". Use " > " not " / ", " | ", or ","')
    return OK


def validate_enum(value: Any, field: str, allowed: Iterable[str]) -> FormatCheck:
    allowed = tuple(allowed)
    if not isinstance(value, str):
        return FormatCheck(False, f"{field} must be a string")
    if value not in allowed:
        return FormatCheck(False, f'Invalid {field}: "{value}". Must be one of: {", ".join(allowed)}')
    return OK


def validate_boolean_enum(value: Any, field: str) -> FormatCheck:
    if isinstance(value, bool):
        return FormatCheck(False, f'{field} must be string "true" or "false", not boolean')
    if not isinstance(value, str):
        return FormatCheck(False, f"{field} must be a string")
    if value not in ("true", "false"):
        return FormatCheck(False, f'{field} must be lowercase string "true" or "false"')
    return OK


def validate_dimensions(value: Any) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, "Dimensions must be a string")
    if not DIMENSIONS_RE.match(value):
        return FormatCheck(False, f'Invalid dimensions format: "{value}". Expected format: "LxWxH unit" (e.g., "12x8x5 in")')
    return OK


def validate_weight(value: Any) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, "Weight must be a string")
    if not NUMBER_UNIT_RE.match(value):
        return FormatCheck(False, f'Invalid weight format: "{value}". Expected format: "XX unit" (e.g., "1.5 lb")')
    return OK


def validate_with_unit(value: Any, field: str) -> FormatCheck:
    if not isinstance(value, str) or not NUMBER_UNIT_RE.match(value.strip()):
        return FormatCheck(False, f'{field} must include unit (e.g., "10 mm")')
    return OK


def parse_date(value: Any) -> date | None:
    if not isinstance(value, str) or not DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def validate_date(value: Any, field: str) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, f"{field} must be a string")
    if not DATE_RE.match(value.strip()):
        return FormatCheck(False, f'Invalid date format for {field}: "{value}". Expected format: YYYY-MM-DD')
    if parse_date(value) is None:
        return FormatCheck(False, f'Invalid date for {field}: "{value}". Not a valid date')
    return OK


def validate_date_range(value: Any, field: str) -> FormatCheck:
    if not isinstance(value, str):
        return FormatCheck(False, f"{field} must be a string")
    parts = value.split(" / ")
    if len(parts) != 2:
        return FormatCheck(
            False,
            f'Invalid date range format for {field}: "{value}". Expected format: "YYYY-MM-DD / YYYY-MM-DD"',
        )
    for label, part in (("start date", parts[0]), ("end date", parts[1])):
        check = validate_date(part, f"{field} {label}")
        if not check.valid:
            return check
    if parse_date(parts[0]) >= parse_date(parts[1]):
        return FormatCheck(False, f"{field} start date must be before end date")
    return OK


def validate_string_length(value: Any, field: str, max_length: int) -> FormatCheck:
    # numeric ids are common in Woo payloads
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return FormatCheck(False, f"{field} must be a string or number")
    if len(value) > max_length:
        return FormatCheck(
            False,
            f"{field} exceeds maximum length of {max_length} characters (current: {len(value)})",
        )
    return OK


def validate_positive_number(value: Any, field: str) -> FormatCheck:
    num = coerce_float(value)
    if num is None:
        return FormatCheck(False, f"{field} must be a valid number")
    if num < 0:
        return FormatCheck(False, f"{field} must be a positive number")
    return OK


def validate_rating(value: Any, field: str) -> FormatCheck:
    check = validate_positive_number(value, field)
    if not check.valid:
        return check
    num = coerce_float(value)
    if num > 5:
        return FormatCheck(False, f"{field} must be between 0 and 5 (current: {num:g})")
    return OK


def validate_title(value: Any) -> FormatCheck:
    check = validate_string_length(value, "title", STRING_LIMITS["title"])
    if not check.valid:
        return check
    text = str(value)
    letters = [c for c in text if c.isalpha()]
    if len(letters) > 3 and text.upper() == text:
        return FormatCheck(True, "title is written in ALL CAPS")
    return OK


def validate_plain_text(value: Any, field: str, max_length: int) -> FormatCheck:
    check = validate_string_length(value, field, max_length)
    if not check.valid:
        return check
    if re.search(r"<[a-zA-Z/][^>]*>", str(value)):
        return FormatCheck(True, f"{field} should be plain text (HTML markup found)")
    return OK


def _url(field: str) -> Callable[[Any], FormatCheck]:
    return lambda v: validate_url(v, field)


def _length(field: str) -> Callable[[Any], FormatCheck]:
    return lambda v: validate_string_length(v, field, STRING_LIMITS[field])


FORMAT_CHECKS: Dict[str, Callable[[Any], FormatCheck]] = {
    "enable_search": lambda v: validate_boolean_enum(v, "enable_search"),
    "enable_checkout": lambda v: validate_boolean_enum(v, "enable_checkout"),
    "price": validate_price,
    "sale_price": validate_price,
    "gtin": validate_gtin,
    "product_category": validate_category_path,
    "availability": lambda v: validate_enum(v, "availability", AVAILABILITY_VALUES),
    "condition": lambda v: validate_enum(v, "condition", CONDITION_VALUES),
    "dimensions": validate_dimensions,
    "length": lambda v: validate_with_unit(v, "length"),
    "width": lambda v: validate_with_unit(v, "width"),
    "height": lambda v: validate_with_unit(v, "height"),
    "weight": validate_weight,
    "availability_date": lambda v: validate_date(v, "availability_date"),
    "expiration_date": lambda v: validate_date(v, "expiration_date"),
    "delivery_estimate": lambda v: validate_date(v, "delivery_estimate"),
    "sale_price_effective_date": lambda v: validate_date_range(v, "sale_price_effective_date"),
    "title": validate_title,
    "description": lambda v: validate_plain_text(v, "description", STRING_LIMITS["description"]),
    "additional_image_link": lambda v: validate_url_list(v, "additional_image_link"),
    "inventory_quantity": lambda v: validate_positive_number(v, "inventory_quantity"),
    "return_window": lambda v: validate_positive_number(v, "return_window"),
    "product_review_count": lambda v: validate_positive_number(v, "product_review_count"),
    "store_review_count": lambda v: validate_positive_number(v, "store_review_count"),
    "age_restriction": lambda v: validate_positive_number(v, "age_restriction"),
    "popularity_score": lambda v: validate_rating(v, "popularity_score"),
    "product_review_rating": lambda v: validate_rating(v, "product_review_rating"),
    "store_review_rating": lambda v: validate_rating(v, "store_review_rating"),
}
for _f in ("link", "image_link", "video_link", "model_3d_link", "seller_url",
           "seller_privacy_policy", "seller_tos", "return_policy", "warning_url"):
    FORMAT_CHECKS[_f] = _url(_f)
for _f in ("id", "brand", "seller_name", "mpn", "item_group_id", "color", "size", "material"):
    FORMAT_CHECKS[_f] = _length(_f)


def check_format(attribute: str, value: Any) -> FormatCheck:
    """Format check for a present value; attributes without a rule pass."""
    if is_empty(value):
        return OK
    check = FORMAT_CHECKS.get(attribute)
    return check(value) if check else OK
