from __future__ import annotations

from typing import Any, Dict

from woofeed.sync.components.util import coerce_int, get, strip_html

TITLE_SEPARATOR = " - "


def strip_html_transform(value: Any, product: Dict[str, Any], shop: Any = None) -> str:
    return strip_html(value)


def clean_variation_title(title: Any, product: Dict[str, Any], shop: Any = None):
    """
    Woo builds variation names as "<Parent> - <Parent> - <options>" when the
    parent name already ends with a dash segment. Collapse the duplicate:

        "Shirt - Shirt - Red, M"  -> "Shirt - Red, M"   (parent_id > 0)
        "Shirt - Red, M"          -> unchanged
    """
    if not isinstance(title, str) or not title:
        return title

    parent_id = coerce_int(get(product, "parent_id"))
    if not parent_id or parent_id <= 0:
        return title

    parts = title.split(TITLE_SEPARATOR)
    if len(parts) < 3:
        return title
    if parts[0].strip() != parts[1].strip():
        return title
    return TITLE_SEPARATOR.join(parts[1:])
