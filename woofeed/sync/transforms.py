#===========================================================================
# woofeed/sync/transforms.py
# Closed set of transforms referenced by the attribute table.
# Every transform is called as fn(value, product, shop) and never raises on
# malformed input; missing data yields None (or "" for text).
#===========================================================================
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict

from woofeed.sync.components.attributes import extract_custom_variant, extract_custom_variant_option
from woofeed.sync.components.availability import default_to_new, default_to_zero, map_stock_status
from woofeed.sync.components.brands import extract_brand, extract_gtin
from woofeed.sync.components.category import build_category_path
from woofeed.sync.components.dimensions import add_unit, add_weight_unit, format_dimensions
from woofeed.sync.components.ids import (
    format_related_ids,
    generate_group_id,
    generate_offer_id,
    generate_stable_id,
)
from woofeed.sync.components.media import extract_additional_images
from woofeed.sync.components.price import format_price_with_currency, format_sale_date_range
from woofeed.sync.components.product_data import (
    build_shipping_string,
    calculate_popularity_score,
    format_q_and_a,
)
from woofeed.sync.components.text import clean_variation_title, strip_html_transform

TransformFn = Callable[[Any, Dict[str, Any], Any], Any]


class TransformKind(str, Enum):
    STRIP_HTML = "strip_html"
    CLEAN_VARIATION_TITLE = "clean_variation_title"
    BUILD_CATEGORY_PATH = "build_category_path"
    GENERATE_STABLE_ID = "generate_stable_id"
    GENERATE_GROUP_ID = "generate_group_id"
    GENERATE_OFFER_ID = "generate_offer_id"
    FORMAT_RELATED_IDS = "format_related_ids"
    FORMAT_PRICE_WITH_CURRENCY = "format_price_with_currency"
    FORMAT_SALE_DATE_RANGE = "format_sale_date_range"
    FORMAT_DIMENSIONS = "format_dimensions"
    ADD_UNIT = "add_unit"
    ADD_WEIGHT_UNIT = "add_weight_unit"
    EXTRACT_ADDITIONAL_IMAGES = "extract_additional_images"
    EXTRACT_GTIN = "extract_gtin"
    EXTRACT_BRAND = "extract_brand"
    EXTRACT_CUSTOM_VARIANT = "extract_custom_variant"
    EXTRACT_CUSTOM_VARIANT_OPTION = "extract_custom_variant_option"
    BUILD_SHIPPING_STRING = "build_shipping_string"
    CALCULATE_POPULARITY_SCORE = "calculate_popularity_score"
    FORMAT_Q_AND_A = "format_q_and_a"
    MAP_STOCK_STATUS = "map_stock_status"
    DEFAULT_TO_NEW = "default_to_new"
    DEFAULT_TO_ZERO = "default_to_zero"


_DISPATCH: Dict[TransformKind, TransformFn] = {
    TransformKind.STRIP_HTML: strip_html_transform,
    TransformKind.CLEAN_VARIATION_TITLE: clean_variation_title,
    TransformKind.BUILD_CATEGORY_PATH: build_category_path,
    TransformKind.GENERATE_STABLE_ID: generate_stable_id,
    TransformKind.GENERATE_GROUP_ID: generate_group_id,
    TransformKind.GENERATE_OFFER_ID: generate_offer_id,
    TransformKind.FORMAT_RELATED_IDS: format_related_ids,
    TransformKind.FORMAT_PRICE_WITH_CURRENCY: format_price_with_currency,
    TransformKind.FORMAT_SALE_DATE_RANGE: format_sale_date_range,
    TransformKind.FORMAT_DIMENSIONS: format_dimensions,
    TransformKind.ADD_UNIT: add_unit,
    TransformKind.ADD_WEIGHT_UNIT: add_weight_unit,
    TransformKind.EXTRACT_ADDITIONAL_IMAGES: extract_additional_images,
    TransformKind.EXTRACT_GTIN: extract_gtin,
    TransformKind.EXTRACT_BRAND: extract_brand,
    TransformKind.EXTRACT_CUSTOM_VARIANT: extract_custom_variant,
    TransformKind.EXTRACT_CUSTOM_VARIANT_OPTION: extract_custom_variant_option,
    TransformKind.BUILD_SHIPPING_STRING: build_shipping_string,
    TransformKind.CALCULATE_POPULARITY_SCORE: calculate_popularity_score,
    TransformKind.FORMAT_Q_AND_A: format_q_and_a,
    TransformKind.MAP_STOCK_STATUS: map_stock_status,
    TransformKind.DEFAULT_TO_NEW: default_to_new,
    TransformKind.DEFAULT_TO_ZERO: default_to_zero,
}

_missing = [k.value for k in TransformKind if k not in _DISPATCH]
if _missing:
    raise ImportError(f"transforms without an implementation: {', '.join(_missing)}")


def transform_kind(name: str | TransformKind | None) -> TransformKind | None:
    """Map an attribute-table transform name to its kind (None if unknown)."""
    if name is None or isinstance(name, TransformKind):
        return name
    try:
        return TransformKind(name)
    except ValueError:
        return None


def apply_transform(kind: TransformKind, value: Any, product: Dict[str, Any], shop: Any) -> Any:
    return _DISPATCH[kind](value, product if isinstance(product, dict) else {}, shop)
