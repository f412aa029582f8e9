from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger("uvicorn.error")

DIMENSION_KEYS = ("length", "width", "height")


@dataclass
class ProductSummary:
    woo_product_id: int
    woo_parent_id: Optional[int]
    title: str | None
    sku: str | None
    product_type: str | None
    checksum: str


def _get(d: Dict[str, Any] | None, key: str, default=None):
    if not isinstance(d, dict):
        return default
    return d.get(key, default)


def _coerce_int(v: Any) -> Optional[int]:
    try:
        if v is None or v == "":
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def checksum(raw: Any) -> str:
    """md5 of the canonical JSON form; key order does not matter."""
    blob = json.dumps(raw, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.md5(blob.encode("utf-8")).hexdigest()


def summarize_product(raw: Dict[str, Any]) -> ProductSummary:
    parent = _coerce_int(_get(raw, "parent_id"))
    return ProductSummary(
        woo_product_id=_coerce_int(_get(raw, "id")) or 0,
        woo_parent_id=parent if parent and parent > 0 else None,
        title=_get(raw, "name"),
        sku=_get(raw, "sku") or None,
        product_type=_get(raw, "type"),
        checksum=checksum(raw),
    )


def _prefer_variation(var_value: Any, parent_value: Any) -> Any:
    if var_value not in (None, "") and var_value != parent_value:
        return var_value
    return parent_value if parent_value is not None else ""


def _variation_attrs(variation: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for attr in _get(variation, "attributes") or []:
        if isinstance(attr, dict) and attr.get("name"):
            out[str(attr["name"]).strip().lower()] = attr.get("option")
    return out


def merge_parent_and_variation(parent: Dict[str, Any], variation: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a standalone product payload for one variation.
      - variation: id, sku, permalink, prices, sale dates, stock, meta, attributes
      - parent:    description, categories, tags, brands, shipping class
      - images:    variation image first, then the parent gallery
      - weight/dimensions: variation values when set and different, else parent
    """
    parent = parent if isinstance(parent, dict) else {}
    variation = variation if isinstance(variation, dict) else {}
    logger.debug("[WOO] merging variation %s into parent %s", variation.get("id"), parent.get("id"))

    images: List[Dict[str, Any]] = []
    v_img = _get(variation, "image")
    if isinstance(v_img, dict) and v_img.get("src"):
        images.append(v_img)
    images.extend(img for img in (_get(parent, "images") or []) if isinstance(img, dict))

    p_dims = _get(parent, "dimensions") or {}
    v_dims = _get(variation, "dimensions") or {}
    dimensions = {k: _prefer_variation(_get(v_dims, k), _get(p_dims, k)) for k in DIMENSION_KEYS}

    var_attrs = _variation_attrs(variation)
    stock_quantity = _get(variation, "stock_quantity")

    return {
        "id": _get(variation, "id"),
        "parent_id": _get(parent, "id"),
        "type": "variation",
        "name": _get(variation, "name") or _get(parent, "name"),
        "description": _get(variation, "description") or _get(parent, "description") or "",
        "short_description": _get(parent, "short_description") or "",
        "sku": _get(variation, "sku") or "",
        "global_unique_id": _get(variation, "global_unique_id") or _get(parent, "global_unique_id") or "",
        "permalink": _get(variation, "permalink") or _get(parent, "permalink"),
        "price": _get(variation, "price") or "",
        "regular_price": _get(variation, "regular_price") or "",
        "sale_price": _get(variation, "sale_price") or "",
        "date_on_sale_from": _get(variation, "date_on_sale_from"),
        "date_on_sale_to": _get(variation, "date_on_sale_to"),
        "stock_status": _get(variation, "stock_status") or "",
        "stock_quantity": stock_quantity,
        "manage_stock": bool(_get(variation, "manage_stock")),
        "weight": _prefer_variation(_get(variation, "weight"), _get(parent, "weight")),
        "dimensions": dimensions,
        "shipping_class": _get(parent, "shipping_class") or "",
        "images": images,
        "attributes": _get(variation, "attributes") or [],
        "categories": _get(parent, "categories") or [],
        "tags": _get(parent, "tags") or [],
        "brands": _get(parent, "brands") or [],
        "related_ids": _get(parent, "related_ids") or [],
        "upsell_ids": _get(parent, "upsell_ids") or [],
        "total_sales": _get(variation, "total_sales", _get(parent, "total_sales")),
        "meta_data": _get(variation, "meta_data") or [],
        "date_modified": _get(variation, "date_modified") or _get(parent, "date_modified"),
        "_variation_color": var_attrs.get("color") or var_attrs.get("colour") or "",
        "_variation_size": var_attrs.get("size") or "",
    }
