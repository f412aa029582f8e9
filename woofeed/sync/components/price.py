from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict

from woofeed.sync.components.util import coerce_float, get, is_empty, shop_value


def format_price_with_currency(price: Any, product: Dict[str, Any] = None, shop: Any = None):
    """Format as "79.90 USD"; unparsable prices resolve to None."""
    num = coerce_float(price)
    if num is None:
        return None
    currency = shop_value(shop, "currency")
    amount = f"{num:.2f}"
    return f"{amount} {str(currency).strip().upper()}" if currency else amount


def _to_date(v: Any) -> date | None:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str) or not v.strip():
        return None
    s = v.strip().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def format_sale_date_range(value: Any, product: Dict[str, Any], shop: Any = None):
    # only meaningful while a sale price is set and both ends are scheduled
    if is_empty(get(product, "sale_price")):
        return None
    start = _to_date(get(product, "date_on_sale_from"))
    end = _to_date(get(product, "date_on_sale_to"))
    if start is None or end is None:
        return None
    return f"{start.isoformat()} / {end.isoformat()}"
