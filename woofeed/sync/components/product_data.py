from __future__ import annotations

import math
from typing import Any, Dict

from woofeed.sync.components.util import coerce_float, get

MAX_POPULARITY = 5.0


def build_shipping_string(value: Any, product: Dict[str, Any] = None, shop: Any = None):
    # Shipping rates are zone-based in Woo and not part of the product payload.
    return None


def calculate_popularity_score(total_sales: Any, product: Dict[str, Any] = None, shop: Any = None):
    """0-5 on a log scale: 9 sales -> 1.0, 99 -> 2.0, 99999+ -> 5.0."""
    sales = coerce_float(total_sales)
    if not sales or sales <= 0:
        return None
    score = min(MAX_POPULARITY, math.log10(sales + 1))
    return round(score, 1)


def format_q_and_a(faq: Any, product: Dict[str, Any] = None, shop: Any = None):
    if isinstance(faq, str):
        return faq.strip() or None
    if not isinstance(faq, list) or not faq:
        return None
    blocks = []
    for item in faq:
        q = get(item, "q") or get(item, "question")
        a = get(item, "a") or get(item, "answer")
        if q and a:
            blocks.append(f"Q: {q}\nA: {a}")
    return "\n\n".join(blocks) or None
