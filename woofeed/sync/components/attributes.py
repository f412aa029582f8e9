from __future__ import annotations

from typing import Any, Dict


def _first_attribute(attributes: Any) -> Dict[str, Any] | None:
    if not isinstance(attributes, list) or not attributes:
        return None
    first = attributes[0]
    return first if isinstance(first, dict) else None


def extract_custom_variant(attributes: Any, product: Dict[str, Any] = None, shop: Any = None):
    """Name of the first variation axis, e.g. "Flavor"."""
    attr = _first_attribute(attributes)
    if attr is None:
        return None
    name = str(attr.get("name") or "").strip()
    return name or None


def extract_custom_variant_option(attributes: Any, product: Dict[str, Any] = None, shop: Any = None):
    attr = _first_attribute(attributes)
    if attr is None:
        return None
    option = attr.get("option")
    if option is not None and option != "":
        return option
    options = attr.get("options")
    if isinstance(options, list) and options:
        return options[0]
    return None
