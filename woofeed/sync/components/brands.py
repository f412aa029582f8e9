from __future__ import annotations

from typing import Any, Dict

from woofeed.mapping.field_paths import extract, first_attribute_option
from woofeed.sync.components.util import is_empty

GTIN_META_KEYS = ("_gtin", "gtin", "_upc", "upc", "_ean", "ean", "_isbn", "isbn")
BRAND_META_KEYS = ("_brand", "brand")


def extract_gtin(value: Any, product: Dict[str, Any] = None, shop: Any = None):
    """
    GTIN from Woo's global_unique_id (a string) or, as fallback, from the
    meta_data list using the usual barcode plugin keys in priority order.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    if isinstance(value, str):
        return value.strip() or None
    if not isinstance(value, list):
        return None

    by_key = {m.get("key"): m.get("value") for m in value if isinstance(m, dict)}
    for key in GTIN_META_KEYS:
        v = by_key.get(key)
        if not is_empty(v):
            return str(v).strip()
    return None


def _brand_attribute(product: Dict[str, Any]):
    option = first_attribute_option(product, "brand")
    if is_empty(option):
        return None
    return str(option).strip()


def extract_brand(brands: Any, product: Dict[str, Any], shop: Any = None):
    """
    Brand lookup:
      1) brand taxonomy (brands[0].name)
      2) a "Brand" product attribute: its option, else its first option
      3) brand meta keys
    """
    if isinstance(brands, str):
        # the attributes.brand fallback hands over the joined options
        joined = extract(product, "attributes.brand")
        if joined is not None and brands == str(joined):
            return _brand_attribute(product)
        return brands.strip() or None
    if isinstance(brands, list) and brands:
        first = brands[0]
        name = first.get("name") if isinstance(first, dict) else first
        if not is_empty(name):
            return str(name).strip()

    attr = _brand_attribute(product)
    if attr:
        return attr

    for key in BRAND_META_KEYS:
        v = extract(product, f"meta_data.{key}")
        if isinstance(v, str) and v.strip():
            return v.strip()
    return None
