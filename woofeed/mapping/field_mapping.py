#===========================================================================
# woofeed/mapping/field_mapping.py
# Per-shop field mappings: attribute -> WooCommerce path (or None).
#
#   - locked attributes always use the platform mapping
#   - key present with None  -> explicitly unmapped
#   - key absent             -> attribute's default mapping (with fallback)
#   - "shop.<field>"         -> read from shop settings
#===========================================================================
from __future__ import annotations

import logging
import re
from typing import Collection, Dict, Mapping, Optional

from woofeed.spec.feed_spec import (
    ALL_ATTRIBUTE_SET,
    DEFAULT_FIELD_MAPPINGS,
    LOCKED_FIELD_MAPPINGS,
    LOCKED_FIELD_SET,
    SPEC_BY_ATTRIBUTE,
    WooMapping,
)

logger = logging.getLogger("uvicorn.error")

SHOP_PREFIX = "shop."
_CAMEL_RE = re.compile(r"(?<!^)([A-Z])")


def shop_field_name(path: str) -> str | None:
    # shop.sellerName and shop.seller_name both read "seller_name"
    if not path or not path.startswith(SHOP_PREFIX):
        return None
    name = path[len(SHOP_PREFIX):].strip()
    if not name:
        return None
    return _CAMEL_RE.sub(r"_\1", name).lower()


def clean_user_mappings(
    mappings: Optional[Mapping[str, Optional[str]]],
    locked: Collection[str] = LOCKED_FIELD_SET,
) -> Dict[str, Optional[str]]:
    """Drop locked and unknown attributes; blank paths count as unmapped."""
    out: Dict[str, Optional[str]] = {}
    for attribute, path in (mappings or {}).items():
        if attribute in locked:
            logger.debug("[MAPPING] ignoring user mapping for locked attribute %s", attribute)
            continue
        if attribute not in ALL_ATTRIBUTE_SET:
            logger.warning("[MAPPING] ignoring mapping for unknown attribute %s", attribute)
            continue
        if path is not None and not isinstance(path, str):
            logger.warning("[MAPPING] ignoring non-string path for %s: %r", attribute, path)
            continue
        out[attribute] = path.strip() if isinstance(path, str) and path.strip() else None
    return out


def effective_mapping(
    attribute: str,
    user_mappings: Mapping[str, Optional[str]],
    locked_mappings: Mapping[str, WooMapping] = LOCKED_FIELD_MAPPINGS,
) -> WooMapping | None:
    """
    The mapping auto-fill should use for one attribute. User paths keep the
    attribute's transform but not its default fallback field.
    """
    if attribute in locked_mappings:
        return locked_mappings[attribute]

    spec = SPEC_BY_ATTRIBUTE.get(attribute)
    if spec is None:
        return None

    if attribute in user_mappings:
        path = user_mappings[attribute]
        if path is None:
            return None
        transform = spec.woo_mapping.transform if spec.woo_mapping else None
        return WooMapping(field=path, transform=transform)

    return spec.woo_mapping


def resolved_mapping_table(user_mappings: Optional[Mapping[str, Optional[str]]] = None) -> Dict[str, Optional[str]]:
    """Defaults overlaid with the shop's own choices, locked entries enforced."""
    table = dict(DEFAULT_FIELD_MAPPINGS)
    table.update(clean_user_mappings(user_mappings))
    for attribute, m in LOCKED_FIELD_MAPPINGS.items():
        table[attribute] = m.field
    return table
