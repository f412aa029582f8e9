#===========================================================================
# woofeed/mapping/field_paths.py
# Parse WooCommerce field paths once and evaluate them against raw products.
#
#   name, dimensions.length       -> DirectPath
#   images[0].src                 -> IndexedPath
#   attributes.Color              -> AttributeLookup (case-insensitive)
#   meta_data._gtin               -> MetaLookup
#
# Evaluation is total: any miss resolves to None.
#===========================================================================
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Tuple, Union

_INDEXED_SEGMENT = re.compile(r"^(\w+)\[(\d+)\]$")

ATTRIBUTES_PREFIX = "attributes."
META_PREFIX = "meta_data."


@dataclass(frozen=True)
class DirectPath:
    keys: Tuple[str, ...]


@dataclass(frozen=True)
class IndexedPath:
    # each step is (key, index-or-None)
    steps: Tuple[Tuple[str, int | None], ...]


@dataclass(frozen=True)
class AttributeLookup:
    name: str


@dataclass(frozen=True)
class MetaLookup:
    key: str


FieldPath = Union[DirectPath, IndexedPath, AttributeLookup, MetaLookup]


@lru_cache(maxsize=512)
def parse_path(path: str) -> FieldPath | None:
    """Returns None for empty or unparseable paths."""
    path = (path or "").strip()
    if not path:
        return None

    if path.startswith(ATTRIBUTES_PREFIX):
        name = path[len(ATTRIBUTES_PREFIX):].strip()
        return AttributeLookup(name) if name else None

    if path.startswith(META_PREFIX):
        key = path[len(META_PREFIX):].strip()
        return MetaLookup(key) if key else None

    segments = path.split(".")
    if any(not s for s in segments):
        return None

    if "[" not in path:
        return DirectPath(tuple(segments))

    steps: List[Tuple[str, int | None]] = []
    for seg in segments:
        m = _INDEXED_SEGMENT.match(seg)
        if m:
            steps.append((m.group(1), int(m.group(2))))
        elif "[" in seg or "]" in seg:
            return None
        else:
            steps.append((seg, None))
    return IndexedPath(tuple(steps))


def _get(d: Any, key: str):
    if not isinstance(d, dict):
        return None
    return d.get(key)


def _attribute_options(raw: Dict[str, Any], name: str):
    """Matching attribute's values: [option] for variations, else the non-empty options."""
    attrs = _get(raw, "attributes")
    if not isinstance(attrs, list):
        return []

    wanted = name.lower()
    for attr in attrs:
        if not isinstance(attr, dict):
            continue
        attr_name = str(attr.get("name") or "").strip().lower()
        if attr_name not in (wanted, f"pa_{wanted}"):
            continue

        # Variations carry a single "option"
        option = attr.get("option")
        if option is not None and option != "":
            return [option]

        # Parent products carry an "options" list
        options = attr.get("options")
        if not isinstance(options, list):
            return []
        return [o for o in options if o is not None and o != ""]
    return []


def first_attribute_option(raw: Any, name: str):
    options = _attribute_options(raw, name)
    return options[0] if options else None


def _attribute_value(raw: Dict[str, Any], name: str):
    options = _attribute_options(raw, name)
    if not options:
        return None
    if len(options) == 1:
        return options[0]
    return ", ".join(str(o) for o in options)


def _meta_value(raw: Dict[str, Any], key: str):
    meta = _get(raw, "meta_data")
    if not isinstance(meta, list):
        return None
    for m in meta:
        if isinstance(m, dict) and m.get("key") == key:
            value = m.get("value")
            if value is None or value == "" or value == [] or value == {}:
                return None
            return value
    return None


def evaluate(raw: Any, parsed: FieldPath | None):
    if parsed is None or not isinstance(raw, dict):
        return None

    if isinstance(parsed, AttributeLookup):
        return _attribute_value(raw, parsed.name)

    if isinstance(parsed, MetaLookup):
        return _meta_value(raw, parsed.key)

    current: Any = raw
    if isinstance(parsed, DirectPath):
        for key in parsed.keys:
            current = _get(current, key)
            if current is None:
                return None
        return current

    for key, index in parsed.steps:
        current = _get(current, key)
        if index is not None:
            if not isinstance(current, list) or index >= len(current):
                return None
            current = current[index]
        if current is None:
            return None
    return current


def extract(raw: Any, path: str | None):
    """Resolve `path` against a raw WooCommerce product; None on any miss."""
    return evaluate(raw, parse_path(path or ""))
