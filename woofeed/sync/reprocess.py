#===========================================================================
# woofeed/sync/reprocess.py
# Keep stored attribute sets fresh.
#
# A product is recomputed when its raw payload checksum changes, or when the
# shop's field mappings / settings changed after the product was last
# computed. Override clearing is batched (one transaction per batch); the
# recompute pass that follows is independent and tolerates failures.
#===========================================================================
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from woofeed.config import settings
from woofeed.models.products import ProductRecord, ShopRecord, utcnow
from woofeed.models.shop import ShopSettings
from woofeed.sync.autofill import AutoFillEngine
from woofeed.sync.feed import FeedProduct
from woofeed.sync.validation import ProductContext, validate_product
from woofeed.woo.product_normalizer import summarize_product

logger = logging.getLogger("uvicorn.error")

REASON_NEW = "new product"
REASON_CHECKSUM = "checksum changed"
REASON_MAPPINGS = "mappings changed"
REASON_SETTINGS = "shop settings changed"

# settings whose change alters auto-fill output
AUTOFILL_SETTINGS = (
    "currency", "dimension_unit", "weight_unit", "shop_name", "woo_store_url",
    "seller_name", "seller_url", "seller_privacy_policy", "seller_tos",
    "return_policy", "return_window",
)


class ProductNotFound(LookupError):
    pass


class ShopNotFound(LookupError):
    pass


def _as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def _changed_after(changed_at: Optional[datetime], computed_at: Optional[datetime]) -> bool:
    changed_at, computed_at = _as_utc(changed_at), _as_utc(computed_at)
    return bool(changed_at and computed_at and changed_at > computed_at)


def staleness_reason(
    existing: Optional[ProductRecord],
    shop: ShopSettings,
    new_checksum: str,
) -> Optional[str]:
    """Why the product needs recomputing, or None when the stored set is current."""
    if existing is None:
        return REASON_NEW
    if _changed_after(shop.field_mappings_updated_at, existing.updated_at):
        return REASON_MAPPINGS
    if _changed_after(shop.settings_updated_at, existing.updated_at):
        return REASON_SETTINGS
    if existing.checksum != new_checksum:
        return REASON_CHECKSUM
    return None


async def get_shop(session: AsyncSession, shop_id: str) -> ShopRecord:
    shop = await session.get(ShopRecord, shop_id)
    if shop is None:
        raise ShopNotFound(shop_id)
    return shop


def engine_for(shop: ShopRecord) -> AutoFillEngine:
    return AutoFillEngine(shop.to_settings(), shop.field_mappings or {})


def recompute(record: ProductRecord, engine: AutoFillEngine) -> None:
    """Refresh auto_filled / is_valid / validation_errors from raw_json and overrides."""
    raw = record.raw_json or {}
    auto_filled = engine.auto_fill(raw, overrides=record.overrides or {}, enable_search=record.enable_search)
    result = validate_product(auto_filled, False, ProductContext.from_product(raw))

    record.auto_filled = auto_filled
    record.is_valid = result.is_valid
    record.validation_errors = [e.model_dump() for e in result.errors]
    record.updated_at = utcnow()


async def upsert_product(
    session: AsyncSession,
    shop: ShopRecord,
    raw: Dict[str, Any],
    engine: Optional[AutoFillEngine] = None,
) -> Tuple[ProductRecord, Optional[str]]:
    """
    Store one raw product (simple product or merged variation).
    Returns (record, reason); reason is None when the product was unchanged.
    """
    summary = summarize_product(raw)
    existing = (await session.execute(
        select(ProductRecord).where(
            ProductRecord.shop_id == shop.id,
            ProductRecord.woo_product_id == summary.woo_product_id,
        )
    )).scalar_one_or_none()

    reason = staleness_reason(existing, shop.to_settings(), summary.checksum)
    if reason is None:
        logger.info("[REPROCESS] skipping unchanged product shop=%s woo_id=%s", shop.id, summary.woo_product_id)
        return existing, None

    record = existing
    if record is None:
        record = ProductRecord(shop_id=shop.id, woo_product_id=summary.woo_product_id, overrides={})
        session.add(record)

    record.woo_parent_id = summary.woo_parent_id
    record.title = summary.title
    record.sku = summary.sku
    record.raw_json = raw
    record.checksum = summary.checksum

    recompute(record, engine or engine_for(shop))
    record.sync_state = "synced"
    logger.info(
        "[REPROCESS] product %s (%s) shop=%s valid=%s",
        summary.woo_product_id, reason, shop.id, record.is_valid,
    )
    return record, reason


async def reprocess_product(session: AsyncSession, product_id: int) -> ProductRecord:
    record = await session.get(ProductRecord, product_id)
    if record is None:
        raise ProductNotFound(product_id)
    if not record.raw_json:
        logger.warning("[REPROCESS] product %s has no raw payload; skipped", product_id)
        return record

    shop = await get_shop(session, record.shop_id)
    recompute(record, engine_for(shop))
    logger.info(
        "[REPROCESS] product %s reprocessed shop=%s valid=%s overrides=%d",
        product_id, record.shop_id, record.is_valid, len(record.overrides or {}),
    )
    return record


async def _product_ids(session: AsyncSession, shop_id: str) -> List[int]:
    rows = await session.execute(
        select(ProductRecord.id).where(ProductRecord.shop_id == shop_id).order_by(ProductRecord.id)
    )
    return list(rows.scalars())


async def _recompute_each(sessionmaker: async_sessionmaker[AsyncSession], product_ids: List[int]) -> int:
    """Second pass; a failing product stays stale until the next trigger."""
    done = 0
    for pid in product_ids:
        try:
            async with sessionmaker() as session:
                async with session.begin():
                    await reprocess_product(session, pid)
            done += 1
        except Exception:
            logger.exception("[REPROCESS] recompute failed for product %s", pid)
    return done


async def clear_overrides_for_field(
    sessionmaker: async_sessionmaker[AsyncSession],
    shop_id: str,
    attribute: str,
    batch_size: Optional[int] = None,
) -> int:
    """Remove `attribute` from every product override set of the shop; returns products changed."""
    batch_size = max(1, batch_size or settings.REPROCESS_BATCH_SIZE)

    async with sessionmaker() as session:
        ids = await _product_ids(session, shop_id)

    cleared: List[int] = []
    for start in range(0, len(ids), batch_size):
        batch = ids[start:start + batch_size]
        async with sessionmaker() as session:
            async with session.begin():
                rows = await session.execute(select(ProductRecord).where(ProductRecord.id.in_(batch)))
                changed = []
                for record in rows.scalars():
                    overrides = dict(record.overrides or {})
                    if attribute in overrides:
                        del overrides[attribute]
                        record.overrides = overrides
                        changed.append(record.id)
        # batch committed
        cleared.extend(changed)

    recomputed = await _recompute_each(sessionmaker, cleared)
    logger.info(
        "[REPROCESS] cleared %s overrides shop=%s products=%d recomputed=%d",
        attribute, shop_id, len(cleared), recomputed,
    )
    return len(cleared)


async def reprocess_all_products(sessionmaker: async_sessionmaker[AsyncSession], shop_id: str) -> int:
    async with sessionmaker() as session:
        ids = await _product_ids(session, shop_id)
    done = await _recompute_each(sessionmaker, ids)
    logger.info("[REPROCESS] reprocessed shop=%s products=%d ok=%d", shop_id, len(ids), done)
    return done


async def get_override_count_for_field(session: AsyncSession, shop_id: str, attribute: str) -> int:
    rows = await session.execute(select(ProductRecord.overrides).where(ProductRecord.shop_id == shop_id))
    return sum(1 for overrides in rows.scalars() if attribute in (overrides or {}))


async def update_field_mappings(
    session: AsyncSession,
    shop_id: str,
    mappings: Mapping[str, Optional[str]],
) -> ShopRecord:
    shop = await get_shop(session, shop_id)
    shop.field_mappings = dict(mappings)
    shop.field_mappings_updated_at = utcnow()
    return shop


async def update_shop_settings(session: AsyncSession, shop_id: str, values: Mapping[str, Any]) -> bool:
    """Merge new settings; bumps settings_updated_at only if an auto-fill input changed."""
    shop = await get_shop(session, shop_id)
    current = dict(shop.settings or {})
    changed = [k for k in AUTOFILL_SETTINGS if k in values and values[k] != current.get(k)]
    current.update(values)
    shop.settings = current
    if changed:
        shop.settings_updated_at = utcnow()
        logger.info("[REPROCESS] shop %s settings changed (%s); products will be reprocessed", shop_id, ", ".join(changed))
    return bool(changed)


def to_feed_product(record: ProductRecord, shop: ShopSettings) -> FeedProduct:
    return FeedProduct(
        woo_product_id=record.woo_product_id,
        woo_parent_id=record.woo_parent_id,
        title=record.title,
        sku=record.sku,
        auto_filled=record.auto_filled or {},
        is_valid=bool(record.is_valid),
        enable_search=shop.default_enable_search if record.enable_search is None else record.enable_search,
        is_selected=bool(record.is_selected),
        sync_state=record.sync_state,
    )


async def load_feed_products(session: AsyncSession, shop_id: str) -> Tuple[ShopSettings, List[FeedProduct]]:
    shop = (await get_shop(session, shop_id)).to_settings()
    rows = await session.execute(select(ProductRecord).where(ProductRecord.shop_id == shop_id))
    return shop, [to_feed_product(r, shop) for r in rows.scalars()]
