from __future__ import annotations

from typing import Any, Dict, List

from woofeed.sync.components.util import coerce_int

CATEGORY_SEPARATOR = " > "
MAX_CATEGORY_DEPTH = 10


def _path_for(cat: Dict[str, Any], by_id: Dict[int, Dict[str, Any]]) -> List[str]:
    path: List[str] = []
    current = cat
    depth = 0
    while current and depth < MAX_CATEGORY_DEPTH:
        name = str(current.get("name") or "").strip()
        if name:
            path.insert(0, name)
        parent = coerce_int(current.get("parent"))
        if not parent or parent <= 0 or parent not in by_id:
            break
        current = by_id[parent]
        depth += 1
    return path


def build_category_path(categories: Any, product: Dict[str, Any] = None, shop: Any = None) -> str:
    """
    Walk parent links among the product's own categories and return the
    deepest chain, e.g. "Apparel > Shoes > Sneakers". Parents the product
    is not assigned to are unknown here, so the walk stops at them.
    """
    if not isinstance(categories, list) or not categories:
        return ""

    cats = [c for c in categories if isinstance(c, dict)]
    by_id: Dict[int, Dict[str, Any]] = {}
    for c in cats:
        cid = coerce_int(c.get("id"))
        if cid:
            by_id[cid] = c

    deepest: List[str] = []
    for c in cats:
        path = _path_for(c, by_id)
        if len(path) > len(deepest):
            deepest = path

    return CATEGORY_SEPARATOR.join(deepest)
