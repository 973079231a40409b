"""Helpers for safely reading untyped JSON/YAML structures.

package.json and pnpm-workspace.yaml are untrusted input: every field is read
through these helpers, which validate at runtime and narrow for type checkers.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested object (dict with string keys)."""
    return as_str_dict(table.get(key))


def get_list(table: Mapping[str, object], key: str) -> ObjList | None:
    return as_obj_list(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """Get a list of non-empty strings.

    Returns None if the key is missing or not a list. Non-string and blank
    items are dropped.
    """
    items = get_list(table, key)
    if items is None:
        return None
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def get_path(table: Mapping[str, object], dotted: str) -> object | None:
    """Resolve a dotted path like ``repository.url`` through nested objects."""
    current: object = table
    for part in dotted.split("."):
        node = as_str_dict(current)
        if node is None or part not in node:
            return None
        current = node[part]
    return current


def set_path(table: StrDict, dotted: str, value: object) -> None:
    """Set a dotted path, creating intermediate objects as needed."""
    parts = dotted.split(".")
    node = table
    for part in parts[:-1]:
        child = as_str_dict(node.get(part))
        if child is None:
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value
