#=======================================================================================
# woofeed/routes.py
# FastAPI routes for the feed core.
#
# Stateless endpoints take the product / shop payloads in the request body.
# The /api/shops/* endpoints work on the stored products.
#
# In main_app.py, include with NO extra prefix to avoid /api/api duplication.
#=======================================================================================
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from woofeed.db import get_sessionmaker
from woofeed.mapping.field_mapping import resolved_mapping_table
from woofeed.models.results import ScoreResult, ValidationResult
from woofeed.models.shop import ShopSettings
from woofeed.spec.feed_spec import ATTRIBUTE_SPECS, CATEGORY_CONFIG, FEED_SPEC, SPEC_BY_ATTRIBUTE, field_stats
from woofeed.sync.autofill import AutoFillEngine
from woofeed.sync.feed import FeedProduct, generate_feed_payload, to_jsonl
from woofeed.sync.reprocess import (
    ProductNotFound,
    ShopNotFound,
    clear_overrides_for_field,
    get_override_count_for_field,
    get_shop,
    load_feed_products,
    reprocess_product,
)
from woofeed.sync.scoring import compute_score
from woofeed.sync.static_values import validate_static_value, validation_info
from woofeed.sync.validation import ProductContext, validate_product

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api", tags=["Feed API"])


def session_factory() -> async_sessionmaker[AsyncSession]:
    return get_sessionmaker()


# ---------------------------
# Request bodies
# ---------------------------
class AutoFillRequest(BaseModel):
    product: Dict[str, Any]
    shop: ShopSettings
    field_mappings: Dict[str, Optional[str]] = Field(default_factory=dict)
    overrides: Dict[str, Any] = Field(default_factory=dict)
    enable_search: Optional[bool] = None


class ScoreRequest(AutoFillRequest):
    skip_fields: List[str] = Field(default_factory=list)


class ValidateRequest(BaseModel):
    attribute_set: Dict[str, Any]
    enable_checkout: bool = False
    is_variation: bool = False
    woo_product_type: Optional[str] = None
    skip_fields: List[str] = Field(default_factory=list)
    strict: bool = False


class OverrideCheck(BaseModel):
    attribute: str
    value: Any = None


class FeedProductIn(BaseModel):
    woo_product_id: int
    woo_parent_id: Optional[int] = None
    title: Optional[str] = None
    sku: Optional[str] = None
    auto_filled: Dict[str, Any] = Field(default_factory=dict)
    is_valid: bool = False
    enable_search: bool = True
    is_selected: bool = True
    sync_state: str = "synced"


class FeedRequest(BaseModel):
    shop: ShopSettings
    products: List[FeedProductIn] = Field(default_factory=list)
    validate_entries: Optional[bool] = None
    skip_invalid_entries: Optional[bool] = None


def _feed_payload(payload: FeedRequest) -> Dict[str, Any]:
    products = [FeedProduct(**p.model_dump()) for p in payload.products]
    return generate_feed_payload(
        payload.shop,
        products,
        validate_entries=payload.validate_entries,
        skip_invalid_entries=payload.skip_invalid_entries,
    )


# ---------------------------
# Attribute table
# ---------------------------
@router.get("/spec")
def get_spec():
    return {
        "version": FEED_SPEC.version,
        "categories": {k: v.model_dump() for k, v in CATEGORY_CONFIG.items()},
        "attributes": [f.model_dump() for f in ATTRIBUTE_SPECS],
        "stats": field_stats(),
    }


@router.get("/spec/mappings/default")
def get_default_mappings():
    return {"mappings": resolved_mapping_table(None)}


@router.get("/spec/{attribute}")
def get_attribute(attribute: str):
    spec = SPEC_BY_ATTRIBUTE.get(attribute)
    if spec is None:
        raise HTTPException(status_code=404, detail=f"Unknown attribute '{attribute}'")
    return {"attribute": spec.model_dump(), "static_value_rules": validation_info(attribute)}


# ---------------------------
# Auto-fill / validation / scoring
# ---------------------------
@router.post("/autofill")
def api_autofill(payload: AutoFillRequest = Body(...)):
    engine = AutoFillEngine(payload.shop, payload.field_mappings)
    values, sources = engine.auto_fill_with_sources(
        payload.product, overrides=payload.overrides, enable_search=payload.enable_search
    )
    return {"values": values, "sources": sources}


@router.post("/validate", response_model=ValidationResult)
def api_validate(payload: ValidateRequest = Body(...)):
    ctx = ProductContext(is_variation=payload.is_variation, woo_product_type=payload.woo_product_type)
    return validate_product(
        payload.attribute_set,
        payload.enable_checkout,
        ctx,
        skip_fields=payload.skip_fields,
        strict=payload.strict,
    )


@router.post("/score")
def api_score(payload: ScoreRequest = Body(...)):
    """Auto-fill, validate and score one product in a single call."""
    engine = AutoFillEngine(payload.shop, payload.field_mappings)
    values = engine.auto_fill(payload.product, overrides=payload.overrides, enable_search=payload.enable_search)
    validation = validate_product(
        values, False, ProductContext.from_product(payload.product), skip_fields=payload.skip_fields
    )
    score: ScoreResult = compute_score(
        values, validation.errors, validation.warnings, skip_fields=payload.skip_fields
    )
    return {"values": values, "validation": validation.model_dump(), "score": score.model_dump()}


@router.post("/overrides/validate")
def api_validate_override(payload: OverrideCheck = Body(...)):
    if payload.attribute not in SPEC_BY_ATTRIBUTE:
        raise HTTPException(status_code=404, detail=f"Unknown attribute '{payload.attribute}'")
    result = validate_static_value(payload.attribute, payload.value)
    if not result.is_valid:
        raise HTTPException(status_code=422, detail={"attribute": payload.attribute, "error": result.error})
    return {"is_valid": True, "error": None}


# ---------------------------
# Feed output
# ---------------------------
@router.post("/feed")
def api_feed(payload: FeedRequest = Body(...)):
    return _feed_payload(payload)


@router.post("/feed.jsonl", response_class=PlainTextResponse)
def api_feed_jsonl(payload: FeedRequest = Body(...)):
    feed = _feed_payload(payload)
    return PlainTextResponse(to_jsonl(feed["items"]), media_type="application/jsonl")


# ---------------------------
# Stored products
# ---------------------------
async def _require_shop(session: AsyncSession, shop_id: str) -> None:
    try:
        await get_shop(session, shop_id)
    except ShopNotFound:
        raise HTTPException(status_code=404, detail=f"Shop '{shop_id}' not found")


@router.get("/shops/{shop_id}/feed")
async def api_shop_feed(
    shop_id: str,
    validate_entries: Optional[bool] = None,
    sessionmaker: async_sessionmaker[AsyncSession] = Depends(session_factory),
):
    async with sessionmaker() as session:
        try:
            shop, products = await load_feed_products(session, shop_id)
        except ShopNotFound:
            raise HTTPException(status_code=404, detail=f"Shop '{shop_id}' not found")
    return generate_feed_payload(shop, products, validate_entries=validate_entries)


@router.post("/shops/{shop_id}/products/{product_id}/reprocess")
async def api_reprocess_product(
    shop_id: str,
    product_id: int,
    sessionmaker: async_sessionmaker[AsyncSession] = Depends(session_factory),
):
    async with sessionmaker() as session:
        async with session.begin():
            try:
                record = await reprocess_product(session, product_id)
            except ProductNotFound:
                raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
            if record.shop_id != shop_id:
                raise HTTPException(status_code=404, detail=f"Product {product_id} not found in shop '{shop_id}'")
            out = {
                "id": record.id,
                "is_valid": record.is_valid,
                "validation_errors": record.validation_errors or [],
                "auto_filled": record.auto_filled or {},
            }
    return out


@router.get("/shops/{shop_id}/overrides/{attribute}/count")
async def api_override_count(
    shop_id: str,
    attribute: str,
    sessionmaker: async_sessionmaker[AsyncSession] = Depends(session_factory),
):
    async with sessionmaker() as session:
        await _require_shop(session, shop_id)
        count = await get_override_count_for_field(session, shop_id, attribute)
    return {"attribute": attribute, "count": count}


@router.delete("/shops/{shop_id}/overrides/{attribute}")
async def api_clear_overrides(
    shop_id: str,
    attribute: str,
    sessionmaker: async_sessionmaker[AsyncSession] = Depends(session_factory),
):
    if attribute not in SPEC_BY_ATTRIBUTE:
        raise HTTPException(status_code=404, detail=f"Unknown attribute '{attribute}'")
    async with sessionmaker() as session:
        await _require_shop(session, shop_id)
    cleared = await clear_overrides_for_field(sessionmaker, shop_id, attribute)
    logger.info("[API] cleared overrides for %s in shop %s: %d", attribute, shop_id, cleared)
    return {"ok": True, "attribute": attribute, "cleared": cleared}
