"""Helpers for safely working with dynamic (untyped) structures.

Use these helpers at boundaries where we ingest TOML/JSON or other untyped data
(the release.toml config and the persisted release state). They provide
runtime validation and static type narrowing.
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
    """Return obj as StrDict if it matches, else None."""
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Get an int value (bools are rejected)."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    if not isinstance(value, bool):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """Get a list of strings; None if missing or any item is not a str."""
    value = table.get(key)
    if not isinstance(value, list):
        return None
    items = cast(list[object], value)
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            return None
        out.append(item)
    return out
