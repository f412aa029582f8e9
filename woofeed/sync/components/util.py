# woofeed/sync/components/util.py
from __future__ import annotations

import html
import math
import re
from typing import Any, Dict

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def strip_html(text: str | None) -> str:
    if not text:
        return ""
    if not isinstance(text, str):
        text = str(text)
    cleaned = html.unescape(_TAG_RE.sub(" ", text))
    return _WS_RE.sub(" ", cleaned).strip()


def is_empty(v: Any) -> bool:
    """None, blank strings and empty collections carry no value."""
    if v is None:
        return True
    if isinstance(v, str):
        return not v.strip()
    if isinstance(v, (list, tuple, dict, set)):
        return len(v) == 0
    return False


def get(d: Dict[str, Any] | None, key: str, default=None):
    if not isinstance(d, dict):
        return default
    return d.get(key, default)


def coerce_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(str(v).strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def coerce_int(v: Any) -> int | None:
    f = coerce_float(v)
    if f is None:
        return None
    return int(f)


def shop_value(shop: Any, name: str):
    """Read a setting from ShopSettings (or a plain dict in tests)."""
    if shop is None:
        return None
    if isinstance(shop, dict):
        v = shop.get(name)
    elif hasattr(shop, "get_setting"):
        v = shop.get_setting(name)
    else:
        v = getattr(shop, name, None)
    if isinstance(v, str) and not v.strip():
        return None
    return v
