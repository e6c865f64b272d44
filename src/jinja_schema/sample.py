"""Merging freshly generated samples with previously edited data.

When a template changes, its schema is extracted again and a fresh sample
generated. Values the user already filled in must survive, variables that
no longer exist must disappear, and untouched placeholders should pick up
the new inferred type.
"""

from __future__ import annotations

from typing import Any


def is_placeholder(value: Any) -> bool:
    """True when ``value`` looks generated rather than edited.

    Placeholders are ``""``, ``0``, ``False``, ``None``, a list holding at
    most one placeholder, and a dict holding only placeholders.
    """
    if value is None or value is False:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        return value == ""
    if isinstance(value, list):
        return len(value) == 0 or (len(value) == 1 and is_placeholder(value[0]))
    if isinstance(value, dict):
        return all(is_placeholder(item) for item in value.values())
    return False


def merge_samples(fresh: dict[str, Any], existing: dict[str, Any]) -> dict[str, Any]:
    """Merge a fresh sample with previously edited data.

    Rules:
        - Keys come from ``fresh``, in its order; top-level keys missing
          from ``fresh`` are dropped.
        - An edited (non-placeholder) existing value is kept.
        - A placeholder existing value is replaced by the fresh one.
        - When both sides are dicts they merge recursively, and nested keys
          only present in ``existing`` are kept.

    Example:
        >>> merge_samples({"name": "", "age": 0}, {"name": "Ada", "old": 1})
        {'name': 'Ada', 'age': 0}
    """
    return _merge(fresh, existing, keep_extra=False)


def _merge(fresh: dict[str, Any], existing: dict[str, Any], *, keep_extra: bool) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, value in fresh.items():
        if key not in existing:
            merged[key] = value
            continue
        old = existing[key]
        if isinstance(value, dict) and isinstance(old, dict):
            merged[key] = _merge(value, old, keep_extra=True)
        elif is_placeholder(old):
            merged[key] = value
        else:
            merged[key] = old
    if keep_extra:
        for key, old in existing.items():
            merged.setdefault(key, old)
    return merged
