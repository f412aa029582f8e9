from __future__ import annotations

from typing import Any, Dict

from woofeed.sync.components.util import coerce_int, is_empty

STOCK_STATUS_MAP = {
    "instock": "in_stock",
    "outofstock": "out_of_stock",
    "onbackorder": "preorder",
}
DEFAULT_AVAILABILITY = "in_stock"


def map_stock_status(stock_status: Any, product: Dict[str, Any] = None, shop: Any = None) -> str:
    key = str(stock_status or "").strip().lower()
    return STOCK_STATUS_MAP.get(key, DEFAULT_AVAILABILITY)


def default_to_new(value: Any, product: Dict[str, Any] = None, shop: Any = None):
    return "new" if is_empty(value) else value


def default_to_zero(value: Any, product: Dict[str, Any] = None, shop: Any = None):
    # Woo sends null stock_quantity when stock is not managed
    n = coerce_int(value)
    return 0 if n is None else n
