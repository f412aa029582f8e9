#===========================================================================
# woofeed/spec/feed_spec.py
# Target attribute table for the commerce feed (loaded from feed_spec.json).
#===========================================================================
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

from woofeed.config import settings

logger = logging.getLogger("uvicorn.error")

Requirement = Literal["Required", "Recommended", "Conditional", "Optional"]

_BUNDLED_SPEC = Path(__file__).with_name("feed_spec.json")


class WooMapping(BaseModel):
    field: Optional[str] = None
    fallback: Optional[str] = None
    transform: Optional[str] = None
    shop_field: Optional[str] = None


class FieldSpec(BaseModel):
    attribute: str
    data_type: str
    supported_values: Optional[str] = None
    description: str = ""
    example: str = ""
    requirement: Requirement
    dependencies: Optional[str] = None
    validation_rules: List[str] = []
    woo_mapping: Optional[WooMapping] = None
    is_locked: bool = False
    category: str


class CategoryInfo(BaseModel):
    label: str
    order: int


class FeedSpec(BaseModel):
    version: str
    categories: Dict[str, CategoryInfo]
    attributes: List[FieldSpec]


def load_feed_spec(path: str | Path | None = None) -> FeedSpec:
    """
    Read and validate the attribute table. Every attribute must point at a
    known category and names must be unique; anything else is a broken
    deployment, so we fail loudly.
    """
    p = Path(path or settings.FEED_SPEC_PATH or _BUNDLED_SPEC)
    data = json.loads(p.read_text(encoding="utf-8"))
    spec = FeedSpec.model_validate(data)

    seen: set[str] = set()
    for f in spec.attributes:
        if f.attribute in seen:
            raise ValueError(f"duplicate attribute in feed spec: {f.attribute}")
        if f.category not in spec.categories:
            raise ValueError(f"attribute {f.attribute} has unknown category {f.category}")
        seen.add(f.attribute)

    logger.debug("[SPEC] loaded %d attributes (v%s) from %s", len(spec.attributes), spec.version, p)
    return spec


FEED_SPEC: FeedSpec = load_feed_spec()

ATTRIBUTE_SPECS: List[FieldSpec] = FEED_SPEC.attributes
SPEC_BY_ATTRIBUTE: Dict[str, FieldSpec] = {f.attribute: f for f in ATTRIBUTE_SPECS}

# Ordered list of every attribute; output records follow this order
ALL_ATTRIBUTES: List[str] = [f.attribute for f in ATTRIBUTE_SPECS]
ALL_ATTRIBUTE_SET = frozenset(ALL_ATTRIBUTES)

CATEGORY_CONFIG: Dict[str, CategoryInfo] = dict(
    sorted(FEED_SPEC.categories.items(), key=lambda kv: kv[1].order)
)

REQUIRED_FIELDS: List[str] = [f.attribute for f in ATTRIBUTE_SPECS if f.requirement == "Required"]

# Platform-fixed mappings; user mappings for these attributes are ignored
LOCKED_FIELD_MAPPINGS: Dict[str, WooMapping] = {
    f.attribute: f.woo_mapping for f in ATTRIBUTE_SPECS if f.is_locked and f.woo_mapping is not None
}
LOCKED_FIELD_SET = frozenset(f.attribute for f in ATTRIBUTE_SPECS if f.is_locked)

# Attributes read from shop settings instead of the product payload
SHOP_MANAGED_ATTRIBUTES: Dict[str, WooMapping] = {
    f.attribute: f.woo_mapping
    for f in ATTRIBUTE_SPECS
    if f.woo_mapping is not None and f.woo_mapping.shop_field
}


def _default_path(f: FieldSpec) -> str | None:
    m = f.woo_mapping
    if m is None:
        return None
    if m.shop_field:
        return f"shop.{m.shop_field}"
    return m.field


# Suggested mapping for a shop that has not customised anything yet
DEFAULT_FIELD_MAPPINGS: Dict[str, str | None] = {f.attribute: _default_path(f) for f in ATTRIBUTE_SPECS}


def fields_by_category(category: str) -> List[FieldSpec]:
    return [f for f in ATTRIBUTE_SPECS if f.category == category]


def field_stats() -> Dict[str, object]:
    return {
        "total": len(ATTRIBUTE_SPECS),
        "required": len(REQUIRED_FIELDS),
        "locked": len(LOCKED_FIELD_SET),
        "by_category": {k: len(fields_by_category(k)) for k in CATEGORY_CONFIG},
    }
