from __future__ import annotations

from typing import Any, Dict

from woofeed.sync.components.util import get, is_empty, shop_value

DIMENSION_KEYS = ("length", "width", "height")


def _filled(v: Any) -> bool:
    return not is_empty(v) and str(v).strip() not in ("0", "0.0")


def _dimension_unit(dims: Any, shop: Any):
    return shop_value(shop, "dimension_unit") or (get(dims, "unit") or None)


def format_dimensions(dims: Any, product: Dict[str, Any] = None, shop: Any = None):
    """{"length": "12", "width": "8", "height": "5"} -> "12x8x5 in"."""
    if isinstance(dims, str):
        return dims.strip() or None
    if not isinstance(dims, dict):
        return None
    values = [get(dims, k) for k in DIMENSION_KEYS]
    if not all(_filled(v) for v in values):
        return None
    unit = _dimension_unit(dims, shop)
    if not unit:
        return None
    return "x".join(str(v).strip() for v in values) + f" {unit}"


def add_unit(value: Any, product: Dict[str, Any], shop: Any = None):
    """
    Single dimension + unit. All-or-nothing: a product with only some of
    length/width/height filled gets no individual dimension either.
    """
    if not _filled(value):
        return None
    dims = get(product, "dimensions") or {}
    if not all(_filled(get(dims, k)) for k in DIMENSION_KEYS):
        return None
    unit = _dimension_unit(dims, shop)
    if not unit:
        return None
    return f"{str(value).strip()} {unit}"


def add_weight_unit(weight: Any, product: Dict[str, Any] = None, shop: Any = None):
    if not _filled(weight):
        return None
    unit = shop_value(shop, "weight_unit")
    if not unit:
        return None
    return f"{str(weight).strip()} {unit}"
