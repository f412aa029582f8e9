from __future__ import annotations

from typing import Any, Dict, List


def _src(img: Any) -> str:
    if isinstance(img, dict):
        return str(img.get("src") or "").strip()
    if isinstance(img, str):
        return img.strip()
    return ""


def extract_additional_images(images: Any, product: Dict[str, Any] = None, shop: Any = None) -> List[str]:
    """Every image after the primary one (which feeds image_link)."""
    if isinstance(images, str):
        return [images.strip()] if images.strip() else []
    if not isinstance(images, list) or len(images) <= 1:
        return []
    return [s for s in (_src(img) for img in images[1:]) if s]
