#===========================================================================
# woofeed/sync/static_values.py
# Check a merchant-entered override value against the attribute's data type
# before it is stored.
#===========================================================================
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from woofeed.spec.feed_spec import SPEC_BY_ATTRIBUTE
from woofeed.sync.validators import parse_date, validate_url

PRICE_RE = re.compile(r"^\d+(\.\d{1,2})?\s+[A-Z]{3}$")
NUMBER_WITH_UNIT_RE = re.compile(r"^\d+(\.\d+)?\s+\w+$")
ALPHANUMERIC_RE = re.compile(r"^[a-zA-Z0-9\-_\s]+$")
INTEGER_RE = re.compile(r"^-?\d+$")
MAX_LENGTH_RULE = re.compile(r"Max (\d+) characters", re.IGNORECASE)


@dataclass(frozen=True)
class StaticValueResult:
    is_valid: bool
    error: Optional[str] = None


VALID = StaticValueResult(True)


def _invalid(msg: str) -> StaticValueResult:
    return StaticValueResult(False, msg)


def _enum(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    if not supported:
        return VALID
    allowed = [s.strip().lower() for s in supported.split(",")]
    return VALID if value.lower() in allowed else _invalid(f"Must be one of: {supported}")


def _url(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    check = validate_url(value, "URL")
    return VALID if check.valid else _invalid("Invalid URL format (must use http or https)")


def _price(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    if not PRICE_RE.match(value):
        return _invalid('Must be in format "79.99 USD" (number + ISO 4217 currency code)')
    return VALID


def _integer(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    return VALID if INTEGER_RE.match(value) else _invalid("Must be a whole number")


def _number(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    try:
        float(value)
    except ValueError:
        return _invalid("Must be a valid number")
    return VALID


def _date(value: str, rules: List[str] = (), supported: Optional[str] = None) -> StaticValueResult:
    return VALID if parse_date(value) else _invalid("Must be in ISO 8601 format (YYYY-MM-DD)")


def _date_range(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    parts = [p.strip() for p in value.split("/")]
    if len(parts) != 2:
        return _invalid('Must be in format "YYYY-MM-DD / YYYY-MM-DD"')
    start, end = parse_date(parts[0]), parse_date(parts[1])
    if start is None:
        return _invalid("Start date: Must be in ISO 8601 format (YYYY-MM-DD)")
    if end is None:
        return _invalid("End date: Must be in ISO 8601 format (YYYY-MM-DD)")
    return _invalid("Start date must be before end date") if start >= end else VALID


def _number_with_unit(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    if not NUMBER_WITH_UNIT_RE.match(value):
        return _invalid('Must be in format "10 mm" (number + unit)')
    return VALID


def _string(value: str, rules: List[str], supported: Optional[str] = None) -> StaticValueResult:
    for rule in rules:
        m = MAX_LENGTH_RULE.search(rule)
        if m and len(value) > int(m.group(1)):
            return _invalid(f"Maximum {m.group(1)} characters allowed")
        if "8-14 digits" in rule:
            digits = re.sub(r"\D", "", value)
            if not 8 <= len(digits) <= 14:
                return _invalid("GTIN must be 8-14 digits")
    return VALID


def _alphanumeric(value: str, rules: List[str], supported: Optional[str]) -> StaticValueResult:
    result = _string(value, rules)
    if not result.is_valid:
        return result
    if not ALPHANUMERIC_RE.match(value):
        return _invalid("Must be alphanumeric (letters, numbers, dashes, underscores only)")
    return VALID


DATA_TYPE_VALIDATORS: Dict[str, Callable[[str, List[str], Optional[str]], StaticValueResult]] = {
    "Enum": _enum,
    "URL": _url,
    "Number + currency": _price,
    "Integer": _integer,
    "Number": _number,
    "Date": _date,
    "Date range": _date_range,
    "Number + unit": _number_with_unit,
    "String (alphanumeric)": _alphanumeric,
}


def validate_static_value(attribute: str, value: Any) -> StaticValueResult:
    """Validate one override value; other data types fall back to the string rules."""
    spec = SPEC_BY_ATTRIBUTE.get(attribute)
    if spec is None:
        return _invalid("Unknown field attribute")

    text = "" if value is None else str(value).strip()
    if not text:
        return _invalid("This field is required") if spec.requirement == "Required" else VALID

    validator = DATA_TYPE_VALIDATORS.get(spec.data_type, _string)
    return validator(text, spec.validation_rules, spec.supported_values)


def validation_info(attribute: str) -> Dict[str, Any] | None:
    spec = SPEC_BY_ATTRIBUTE.get(attribute)
    if spec is None:
        return None
    return {
        "data_type": spec.data_type,
        "supported_values": spec.supported_values,
        "validation_rules": spec.validation_rules,
        "example": spec.example,
    }
