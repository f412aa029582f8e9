from __future__ import annotations

from typing import Any, Dict, List

from woofeed.mapping.field_paths import extract
from woofeed.sync.components.util import coerce_int, get, is_empty, shop_value


def _shop_id(shop: Any) -> str:
    return str(shop_value(shop, "id") or "")


def stable_id(shop: Any, product_id: Any, sku: Any = None) -> str:
    parts = [_shop_id(shop), str(product_id if product_id is not None else "")]
    if not is_empty(sku):
        parts.append(str(sku).strip())
    return "-".join(parts)


def generate_stable_id(value: Any, product: Dict[str, Any], shop: Any) -> str:
    """{shop_id}-{product_id}[-{sku}]; stable across syncs for the same product."""
    return stable_id(shop, get(product, "id"), get(product, "sku"))


def generate_group_id(parent_id: Any, product: Dict[str, Any], shop: Any) -> str:
    # every variation of a parent shares "{shop_id}-{parent_id}"
    pid = coerce_int(parent_id)
    if pid and pid > 0:
        return stable_id(shop, pid)
    return stable_id(shop, get(product, "id"))


def generate_offer_id(sku: Any, product: Dict[str, Any], shop: Any = None) -> str:
    base = str(sku).strip() if not is_empty(sku) else f"prod-{get(product, 'id')}"
    parts: List[str] = [base]
    for attr in ("color", "size"):
        v = extract(product, f"attributes.{attr}")
        if not is_empty(v):
            parts.append(str(v).strip())
    return "-".join(parts)


def format_related_ids(related: Any, product: Dict[str, Any], shop: Any):
    if not isinstance(related, list):
        return None
    ids = [stable_id(shop, r) for r in related if not is_empty(r)]
    return ",".join(ids) if ids else None
