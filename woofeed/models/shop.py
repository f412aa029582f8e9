from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ShopSettings(BaseModel):
    """
    Shop-level values that apply to every product of a store.
    Refreshed from the store on each sync; settings_updated_at moves only
    when something that affects auto-fill (currency, units, seller info)
    actually changed.
    """
    id: str = Field(..., description="Shop identifier, used as the stable id prefix")
    shop_name: Optional[str] = None
    woo_store_url: Optional[str] = None
    currency: Optional[str] = Field(None, description="ISO 4217 code, e.g. USD")
    dimension_unit: Optional[str] = None
    weight_unit: Optional[str] = None

    seller_name: Optional[str] = None
    seller_url: Optional[str] = None
    seller_privacy_policy: Optional[str] = None
    seller_tos: Optional[str] = None
    return_policy: Optional[str] = None
    return_window: Optional[int] = None

    default_enable_search: bool = True
    merchant_id: Optional[str] = None

    settings_updated_at: Optional[datetime] = None
    field_mappings_updated_at: Optional[datetime] = None

    class Config:
        extra = "allow"

    def get_setting(self, name: str) -> Any:
        """Read a shop field by name (unknown names resolve to None)."""
        value = getattr(self, name, None)
        if value is None and self.model_extra:
            value = self.model_extra.get(name)
        if isinstance(value, str) and not value.strip():
            return None
        return value
