#===========================================================================
# woofeed/sync/validation.py
# Validate a complete attribute set: presence by requirement level,
# conditional requirements, per-value formats and cross-field rules.
#===========================================================================
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Collection, Dict, Iterable, List, Mapping, Optional

from woofeed.models.results import CommonError, FieldIssue, ValidationResult, ValidationSummary
from woofeed.spec.feed_spec import ATTRIBUTE_SPECS, FieldSpec
from woofeed.sync.components.util import coerce_float, coerce_int, get, is_empty
from woofeed.sync.validators import check_format

REQUIRED = "Required"
RECOMMENDED = "Recommended"
OPTIONAL = "Optional"

# brand is not expected for these product families
BRAND_EXEMPT_WORDS = frozenset({"movie", "movies", "film", "films", "book", "books", "music", "musical"})
_WORD_RE = re.compile(r"[a-z]+")


@dataclass(frozen=True)
class ProductContext:
    is_variation: bool = False
    woo_product_type: Optional[str] = None

    @classmethod
    def from_product(cls, product: Dict[str, Any] | None) -> "ProductContext":
        ptype = get(product, "type")
        parent_id = coerce_int(get(product, "parent_id")) or 0
        return cls(is_variation=parent_id > 0 or ptype == "variation", woo_product_type=ptype)


ConditionalRule = Callable[[Mapping[str, Any], bool, ProductContext], Optional[str]]


def _brand_expected(values: Mapping[str, Any], enable_checkout: bool, ctx: ProductContext) -> Optional[str]:
    category = str(values.get("product_category") or "").lower()
    if BRAND_EXEMPT_WORDS.intersection(_WORD_RE.findall(category)):
        return None
    return "the product is not a movie, book or music recording"


def _when_checkout(values: Mapping[str, Any], enable_checkout: bool, ctx: ProductContext) -> Optional[str]:
    return "enable_checkout is true" if enable_checkout else None


CONDITIONAL_RULES: Dict[str, ConditionalRule] = {
    "mpn": lambda v, c, ctx: "gtin is not provided" if is_empty(v.get("gtin")) else None,
    "brand": _brand_expected,
    "availability_date": lambda v, c, ctx: "availability is preorder" if v.get("availability") == "preorder" else None,
    "item_group_id": lambda v, c, ctx: "the product is a variation" if ctx.is_variation else None,
    "shipping": _when_checkout,
    "seller_privacy_policy": _when_checkout,
    "seller_tos": _when_checkout,
    # condition defaults to "new" during auto-fill, so it is never enforced
    "condition": lambda v, c, ctx: None,
}


def effective_requirement(
    spec: FieldSpec,
    values: Mapping[str, Any],
    enable_checkout: bool,
    ctx: ProductContext,
) -> tuple[str, Optional[str]]:
    """Collapse Conditional into Required/Optional for this product; returns (level, reason)."""
    if spec.requirement != "Conditional":
        return spec.requirement, None
    rule = CONDITIONAL_RULES.get(spec.attribute)
    reason = rule(values, enable_checkout, ctx) if rule else None
    return (REQUIRED, reason) if reason else (OPTIONAL, None)


def _price_amount(value: Any) -> tuple[float | None, str | None]:
    if not isinstance(value, str):
        return coerce_float(value), None
    parts = value.split()
    amount = coerce_float(parts[0]) if parts else None
    return amount, (parts[1] if len(parts) > 1 else None)


def _cross_field_checks(values: Mapping[str, Any], skip: Collection[str]):
    """Yields (severity, field, message) for rules spanning several attributes."""
    def active(*fields: str) -> bool:
        return not any(f in skip for f in fields)

    price, cur = _price_amount(values.get("price"))
    sale, sale_cur = _price_amount(values.get("sale_price"))
    if active("price", "sale_price") and price is not None and sale is not None and cur == sale_cur:
        if sale >= price:
            yield "error", "sale_price", f"sale_price ({values.get('sale_price')}) must be lower than price ({values.get('price')})"

    if active("sale_price", "sale_price_effective_date") and not is_empty(values.get("sale_price")) \
            and is_empty(values.get("sale_price_effective_date")):
        yield "warning", "sale_price_effective_date", "sale_price is set without sale_price_effective_date"

    if active("availability", "availability_date") and not is_empty(values.get("availability_date")) \
            and values.get("availability") != "preorder":
        yield "error", "availability_date", "availability_date must be empty unless availability is preorder"

    if active("enable_search", "enable_checkout") and values.get("enable_checkout") == "true" \
            and values.get("enable_search") != "true":
        yield "error", "enable_checkout", "enable_checkout requires enable_search to be true"

    dims = [not is_empty(values.get(k)) for k in ("length", "width", "height")]
    if active("length", "width", "height") and any(dims) and not all(dims):
        yield "warning", "dimensions", "length, width and height should be provided together"

    units = [not is_empty(values.get(k)) for k in ("unit_pricing_measure", "unit_pricing_base_measure")]
    if active("unit_pricing_measure", "unit_pricing_base_measure") and any(units) and not all(units):
        yield "warning", "unit_pricing_measure", "unit_pricing_measure and unit_pricing_base_measure must be provided together"

    if active("pickup_method", "pickup_sla") and not is_empty(values.get("pickup_sla")) \
            and is_empty(values.get("pickup_method")):
        yield "warning", "pickup_sla", "pickup_sla requires pickup_method"


def validate_product(
    attribute_set: Mapping[str, Any] | None,
    enable_checkout: bool,
    product_context: ProductContext | None,
    *,
    skip_fields: Iterable[str] = (),
    strict: bool = False,
) -> ValidationResult:
    """
    Errors come from Required fields (including Conditional ones whose
    condition holds) and cross-field violations; everything else is a
    warning. Never raises for bad data; raises ValueError when called
    without a product context.
    """
    if product_context is None:
        raise ValueError("validate_product requires a product_context")

    values: Mapping[str, Any] = attribute_set if isinstance(attribute_set, Mapping) else {}
    skip = frozenset(skip_fields)
    errors: List[FieldIssue] = []
    warnings: List[FieldIssue] = []

    for spec in ATTRIBUTE_SPECS:
        attribute = spec.attribute
        if attribute in skip:
            continue
        level, reason = effective_requirement(spec, values, enable_checkout, product_context)
        value = values.get(attribute)

        if is_empty(value):
            if level == REQUIRED:
                msg = f'Required field "{attribute}" is missing'
                errors.append(FieldIssue(field=attribute, error=f"{msg} ({reason})" if reason else msg))
            elif level == RECOMMENDED:
                warnings.append(FieldIssue(field=attribute, error=f'Recommended field "{attribute}" is missing'))
            continue

        check = check_format(attribute, value)
        if not check.valid:
            bucket = errors if level == REQUIRED else warnings
            bucket.append(FieldIssue(field=attribute, error=check.message))
        elif check.message:
            warnings.append(FieldIssue(field=attribute, error=check.message))

    for severity, attribute, message in _cross_field_checks(values, skip):
        bucket = errors if severity == "error" else warnings
        bucket.append(FieldIssue(field=attribute, error=message))

    if strict and warnings:
        errors = errors + warnings

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def summarize_validations(results: Iterable[ValidationResult], top: int = 10) -> ValidationSummary:
    """Shop-level roll-up for operators: counts plus the most frequent errors."""
    summary = ValidationSummary()
    counts: Counter[str] = Counter()
    for r in results:
        summary.total += 1
        if not r.is_valid:
            summary.invalid += 1
        if r.warnings:
            summary.with_warnings += 1
        summary.total_errors += len(r.errors)
        summary.total_warnings += len(r.warnings)
        counts.update(e.error for e in r.errors)
    summary.common_errors = [CommonError(error=e, count=n) for e, n in counts.most_common(top)]
    return summary
