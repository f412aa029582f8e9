#===========================================================================
# woofeed/sync/feed.py
# Feed assembly: pick eligible products, build complete feed items,
# optionally re-validate, and serialize (JSON payload / JSONL).
#===========================================================================
from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from woofeed.config import settings
from woofeed.models.shop import ShopSettings
from woofeed.spec.feed_spec import ALL_ATTRIBUTES, ALL_ATTRIBUTE_SET
from woofeed.sync.components.ids import stable_id
from woofeed.sync.validation import ProductContext, validate_product

logger = logging.getLogger("uvicorn.error")

SYNC_STATE_SYNCED = "synced"
TOP_ERRORS = 5


@dataclass
class FeedProduct:
    """What the feed needs to know about one stored product."""
    woo_product_id: int
    woo_parent_id: Optional[int] = None
    title: str | None = None
    sku: str | None = None
    auto_filled: Dict[str, Any] = field(default_factory=dict)
    is_valid: bool = False
    enable_search: bool = True
    is_selected: bool = True
    sync_state: str = SYNC_STATE_SYNCED


@dataclass
class InvalidProduct:
    product_id: int
    errors: List[Dict[str, str]]


@dataclass
class FeedValidationStats:
    total: int = 0
    valid: int = 0
    invalid: int = 0
    warnings: int = 0
    invalid_products: List[InvalidProduct] = field(default_factory=list)

    def top_errors(self, n: int = TOP_ERRORS) -> List[Dict[str, Any]]:
        counts: Counter = Counter(
            e["error"] for p in self.invalid_products for e in p.errors
        )
        return [{"error": e, "count": c} for e, c in counts.most_common(n)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "warnings": self.warnings,
            "invalidProducts": [
                {"productId": p.product_id, "errors": p.errors} for p in self.invalid_products
            ],
        }


def parent_product_ids(products: Iterable[FeedProduct]) -> Set[int]:
    """Woo ids that act as parents; only their variations go into the feed."""
    return {p.woo_parent_id for p in products if p.woo_parent_id}


def is_feed_eligible(product: FeedProduct, parent_ids: Set[int] | None = None) -> bool:
    if parent_ids and product.woo_product_id in parent_ids:
        return False
    return (
        product.is_valid is True
        and product.enable_search is True
        and product.is_selected is True
        and product.sync_state == SYNC_STATE_SYNCED
    )


def eligible_products(products: Iterable[FeedProduct]) -> List[FeedProduct]:
    products = list(products)
    parents = parent_product_ids(products)
    return [p for p in products if is_feed_eligible(p, parents)]


def build_feed_item(shop: ShopSettings, product: FeedProduct) -> Dict[str, Any]:
    """
    Every spec attribute, in spec order. The two flags are recomputed from
    the product record rather than trusted from the cached attribute set.
    """
    cached = product.auto_filled or {}
    item: Dict[str, Any] = {}
    for attribute in ALL_ATTRIBUTES:
        if attribute == "id":
            item[attribute] = cached.get("id") or stable_id(shop, product.woo_product_id)
        elif attribute == "enable_search":
            item[attribute] = "true" if product.enable_search else "false"
        elif attribute == "enable_checkout":
            item[attribute] = "false"
        else:
            item[attribute] = cached.get(attribute)

    for key in cached:
        if key not in ALL_ATTRIBUTE_SET:
            logger.warning(
                "[FEED] skipping non-spec field %s (shop=%s product=%s)",
                key, shop.id, product.woo_product_id,
            )
    return item


def seller_block(shop: ShopSettings) -> Dict[str, Any]:
    return {
        "id": shop.merchant_id or shop.id,
        "name": shop.get_setting("seller_name") or shop.get_setting("shop_name"),
        "url": shop.get_setting("seller_url") or shop.get_setting("woo_store_url"),
        "privacy_policy": shop.get_setting("seller_privacy_policy"),
        "terms_of_service": shop.get_setting("seller_tos"),
    }


def _iso_utc(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_feed_payload(
    shop: ShopSettings,
    products: Iterable[FeedProduct],
    *,
    validate_entries: Optional[bool] = None,
    skip_invalid_entries: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    {seller, generatedAt, items[, validationStats]} for one shop.
    validate_entries / skip_invalid_entries default to FEED_VALIDATE_ENTRIES
    and FEED_SKIP_INVALID_ENTRIES.
    """
    if validate_entries is None:
        validate_entries = settings.FEED_VALIDATE_ENTRIES
    if skip_invalid_entries is None:
        skip_invalid_entries = settings.FEED_SKIP_INVALID_ENTRIES

    stats = FeedValidationStats()
    items: List[Dict[str, Any]] = []

    for product in eligible_products(products):
        item = build_feed_item(shop, product)
        stats.total += 1

        if not validate_entries:
            stats.valid += 1
            items.append(item)
            continue

        ctx = ProductContext(is_variation=bool(product.woo_parent_id))
        result = validate_product(item, False, ctx)

        if result.warnings:
            stats.warnings += 1
            logger.debug(
                "[FEED] product %s has %d warnings", product.woo_product_id, len(result.warnings)
            )

        if not result.is_valid:
            stats.invalid += 1
            stats.invalid_products.append(InvalidProduct(
                product_id=product.woo_product_id,
                errors=[e.model_dump() for e in result.errors],
            ))
            logger.error(
                "[FEED] invalid entry shop=%s product=%s title=%r errors=%d",
                shop.id, product.woo_product_id, product.title, len(result.errors),
            )
            if skip_invalid_entries:
                continue
        else:
            stats.valid += 1

        items.append(item)

    if validate_entries:
        logger.info(
            "[FEED] validation summary shop=%s total=%d valid=%d invalid=%d warnings=%d included=%d",
            shop.id, stats.total, stats.valid, stats.invalid, stats.warnings, len(items),
        )
        top = stats.top_errors()
        if top:
            logger.warning("[FEED] most common validation errors shop=%s: %s", shop.id, top)

    payload: Dict[str, Any] = {
        "seller": seller_block(shop),
        "generatedAt": _iso_utc(now or datetime.now(timezone.utc)),
        "items": items,
    }
    if validate_entries:
        payload["validationStats"] = stats.to_dict()
    return payload


def to_jsonl(items: Iterable[Dict[str, Any]]) -> str:
    """One JSON object per line."""
    return "\n".join(json.dumps(item, ensure_ascii=False) for item in items)


def payload_to_json(payload: Dict[str, Any], pretty: bool = False) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None)
