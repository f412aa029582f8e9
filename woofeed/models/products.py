# woofeed/models/products.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from woofeed.db import Base
from woofeed.models.shop import ShopSettings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShopRecord(Base):
    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    settings: Mapped[dict] = mapped_column(JSON, default=dict)            # ShopSettings fields
    field_mappings: Mapped[dict] = mapped_column(JSON, default=dict)      # attribute -> path | None
    settings_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    field_mappings_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def to_settings(self) -> ShopSettings:
        data: dict[str, Any] = dict(self.settings or {})
        data["id"] = self.id
        data["settings_updated_at"] = self.settings_updated_at
        data["field_mappings_updated_at"] = self.field_mappings_updated_at
        return ShopSettings(**data)


class ProductRecord(Base):
    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("shop_id", "woo_product_id", name="uq_products_shop_woo"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_id: Mapped[str] = mapped_column(String(64), ForeignKey("shops.id"), index=True)
    woo_product_id: Mapped[int] = mapped_column(Integer, index=True)
    woo_parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    sku: Mapped[str | None] = mapped_column(String(128), nullable=True)

    raw_json: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    checksum: Mapped[str | None] = mapped_column(String(32), nullable=True)
    overrides: Mapped[dict] = mapped_column(JSON, default=dict)          # attribute -> value | {type, value}
    auto_filled: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=False)
    validation_errors: Mapped[list | None] = mapped_column(JSON, nullable=True)

    enable_search: Mapped[bool | None] = mapped_column(Boolean, nullable=True)  # None -> shop default
    is_selected: Mapped[bool] = mapped_column(Boolean, default=True)
    sync_state: Mapped[str] = mapped_column(String(32), default="pending", index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
