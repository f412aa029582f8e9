#===========================================================================
# woofeed/sync/autofill.py
# Resolve every feed attribute for one raw WooCommerce product.
#
# Per attribute, first resolver that produces a value wins:
#   locked -> override -> shop-managed -> mapping -> None
# id, enable_search and enable_checkout are hardwired and bypass the chain.
#===========================================================================
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from woofeed.mapping.field_mapping import clean_user_mappings, effective_mapping, shop_field_name
from woofeed.mapping.field_paths import extract
from woofeed.models.shop import ShopSettings
from woofeed.spec.feed_spec import (
    ALL_ATTRIBUTES,
    ATTRIBUTE_SPECS,
    LOCKED_FIELD_MAPPINGS,
    SHOP_MANAGED_ATTRIBUTES,
    SPEC_BY_ATTRIBUTE,
    WooMapping,
)
from woofeed.sync.components.ids import stable_id
from woofeed.sync.components.util import get, is_empty
from woofeed.sync.transforms import apply_transform, transform_kind

logger = logging.getLogger("uvicorn.error")

HARDWIRED_ATTRIBUTES = ("id", "enable_search", "enable_checkout")
OVERRIDE_STATIC = "static"
OVERRIDE_MAPPING = "mapping"

# Every transform named in the attribute table must be a known kind
_unknown = [
    f"{f.attribute}:{f.woo_mapping.transform}"
    for f in ATTRIBUTE_SPECS
    if f.woo_mapping and f.woo_mapping.transform and transform_kind(f.woo_mapping.transform) is None
]
if _unknown:
    raise ValueError(f"feed spec references unknown transforms: {', '.join(_unknown)}")


@dataclass(frozen=True)
class Resolved:
    value: Any


@dataclass
class FillContext:
    product: Dict[str, Any]
    shop: ShopSettings
    overrides: Mapping[str, Any] = field(default_factory=dict)
    user_mappings: Mapping[str, Optional[str]] = field(default_factory=dict)
    locked_mappings: Mapping[str, WooMapping] = field(default_factory=lambda: LOCKED_FIELD_MAPPINGS)


Resolver = Callable[[str, FillContext], Optional[Resolved]]


def _normalize(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, (list, dict)) and not value:
        return None
    return value


def _read_shop(ctx: FillContext, name: str | None):
    if not name:
        return None
    return ctx.shop.get_setting(name)


def resolve_woo_mapping(attribute: str, mapping: WooMapping, ctx: FillContext) -> Any:
    """Evaluate one mapping (shop field, path + fallback, then transform)."""
    if mapping.shop_field:
        value = _read_shop(ctx, mapping.shop_field)
        if is_empty(value) and mapping.fallback:
            value = _read_shop(ctx, shop_field_name("shop." + mapping.fallback))
        return _normalize(value)

    if mapping.field and shop_field_name(mapping.field):
        return _normalize(_read_shop(ctx, shop_field_name(mapping.field)))

    value = extract(ctx.product, mapping.field) if mapping.field else None
    if is_empty(value) and mapping.fallback:
        value = extract(ctx.product, mapping.fallback)

    kind = transform_kind(mapping.transform)
    if kind is not None:
        # transforms also run on None so default_to_* can fill in
        try:
            value = apply_transform(kind, value, ctx.product, ctx.shop)
        except Exception:
            logger.error(
                "[AUTOFILL] transform %s failed for %s (shop=%s product=%s)",
                kind.value, attribute, ctx.shop.id, get(ctx.product, "id"),
                exc_info=True,
            )
            value = None
    return _normalize(value)


def resolve_locked(attribute: str, ctx: FillContext) -> Optional[Resolved]:
    mapping = ctx.locked_mappings.get(attribute)
    if mapping is None:
        return None
    return Resolved(resolve_woo_mapping(attribute, mapping, ctx))


def unwrap_override(raw: Any) -> Tuple[str, Any]:
    """Overrides are stored bare or as {"type": "static"|"mapping", "value": ...}."""
    if isinstance(raw, dict) and "value" in raw:
        kind = str(raw.get("type") or OVERRIDE_STATIC).lower()
        return kind, raw.get("value")
    return OVERRIDE_STATIC, raw


def resolve_override(attribute: str, ctx: FillContext) -> Optional[Resolved]:
    if attribute not in ctx.overrides:
        return None
    kind, value = unwrap_override(ctx.overrides[attribute])
    if is_empty(value):
        return None

    if kind == OVERRIDE_MAPPING and isinstance(value, str):
        # per-product path; still goes through the attribute transform
        mapping = effective_mapping(attribute, {attribute: value}, locked_mappings={})
        return Resolved(resolve_woo_mapping(attribute, mapping, ctx)) if mapping else None

    return Resolved(value)


def resolve_shop_managed(attribute: str, ctx: FillContext) -> Optional[Resolved]:
    mapping = SHOP_MANAGED_ATTRIBUTES.get(attribute)
    if mapping is None:
        return None
    return Resolved(resolve_woo_mapping(attribute, mapping, ctx))


def resolve_mapping(attribute: str, ctx: FillContext) -> Optional[Resolved]:
    mapping = effective_mapping(attribute, ctx.user_mappings, locked_mappings={})
    if mapping is None:
        return None
    return Resolved(resolve_woo_mapping(attribute, mapping, ctx))


def resolve_null(attribute: str, ctx: FillContext) -> Optional[Resolved]:
    return Resolved(None)


RESOLVER_CHAIN: List[Tuple[str, Resolver]] = [
    ("locked", resolve_locked),
    ("override", resolve_override),
    ("shop", resolve_shop_managed),
    ("mapping", resolve_mapping),
    ("null", resolve_null),
]


def _flag(value: Optional[bool], default: bool) -> str:
    return "true" if (default if value is None else value) else "false"


class AutoFillEngine:
    """
    Auto-fill for one shop. Build once per shop/sync and reuse across products;
    the engine holds no per-product state, so output depends only on its inputs.
    """

    def __init__(
        self,
        shop: ShopSettings,
        field_mappings: Optional[Mapping[str, Optional[str]]] = None,
        locked_mappings: Optional[Mapping[str, WooMapping]] = None,
    ):
        self.shop = shop
        self.locked_mappings = dict(LOCKED_FIELD_MAPPINGS if locked_mappings is None else locked_mappings)
        self.field_mappings = clean_user_mappings(field_mappings, locked=self.locked_mappings.keys())

    def _context(self, product: Dict[str, Any], overrides: Optional[Mapping[str, Any]]) -> FillContext:
        return FillContext(
            product=product if isinstance(product, dict) else {},
            shop=self.shop,
            overrides=overrides or {},
            user_mappings=self.field_mappings,
            locked_mappings=self.locked_mappings,
        )

    def _hardwired(self, attribute: str, ctx: FillContext, enable_search: Optional[bool]) -> Any:
        if attribute == "id":
            return stable_id(self.shop, get(ctx.product, "id"), get(ctx.product, "sku"))
        if attribute == "enable_search":
            return _flag(enable_search, self.shop.default_enable_search)
        # checkout is not offered; never derived from data
        return "false"

    def resolve(self, attribute: str, ctx: FillContext) -> Tuple[str, Any]:
        """Run the chain for one attribute; returns (resolver name, value)."""
        for name, resolver in RESOLVER_CHAIN:
            hit = resolver(attribute, ctx)
            if hit is not None:
                return name, hit.value
        return "null", None

    def auto_fill_with_sources(
        self,
        product: Dict[str, Any],
        overrides: Optional[Mapping[str, Any]] = None,
        enable_search: Optional[bool] = None,
    ) -> Tuple[Dict[str, Any], Dict[str, str]]:
        ctx = self._context(product, overrides)
        values: Dict[str, Any] = {}
        sources: Dict[str, str] = {}
        for attribute in ALL_ATTRIBUTES:
            if attribute in HARDWIRED_ATTRIBUTES:
                values[attribute] = self._hardwired(attribute, ctx, enable_search)
                sources[attribute] = "hardwired"
                continue
            sources[attribute], values[attribute] = self.resolve(attribute, ctx)
        return values, sources

    def auto_fill(
        self,
        product: Dict[str, Any],
        overrides: Optional[Mapping[str, Any]] = None,
        enable_search: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Complete attribute set for `product`: every attribute of the feed spec,
        in spec order, resolved value or None.
        """
        values, _ = self.auto_fill_with_sources(product, overrides=overrides, enable_search=enable_search)
        return values


def auto_fill_product(
    product: Dict[str, Any],
    shop: ShopSettings,
    field_mappings: Optional[Mapping[str, Optional[str]]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    enable_search: Optional[bool] = None,
) -> Dict[str, Any]:
    """One-off helper; prefer a shared AutoFillEngine when filling many products."""
    return AutoFillEngine(shop, field_mappings).auto_fill(product, overrides=overrides, enable_search=enable_search)


def describe_attribute(attribute: str) -> Dict[str, Any] | None:
    spec = SPEC_BY_ATTRIBUTE.get(attribute)
    if spec is None:
        return None
    return {
        "attribute": spec.attribute,
        "requirement": spec.requirement,
        "locked": attribute in LOCKED_FIELD_MAPPINGS,
        "shop_managed": attribute in SHOP_MANAGED_ATTRIBUTES,
        "hardwired": attribute in HARDWIRED_ATTRIBUTES,
        "mapping": spec.woo_mapping.model_dump(exclude_none=True) if spec.woo_mapping else None,
    }
