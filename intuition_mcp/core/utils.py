"""Utility functions for shaping GraphQL variables and results."""

from typing import Any


def ilike_contains(term: str | None) -> str:
    """Pattern matching `term` anywhere. A missing term matches everything."""
    if not term:
        return "%"
    return f"%{term}%"


def ilike_suffix(term: str) -> str:
    """Pattern matching values ending with `term`."""
    return f"%{term}"


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, list) and not value)


def remove_empty_fields(obj: Any) -> Any:
    """
    Recursively drop None, empty strings and empty lists.
    Objects left without keys collapse to None.
    """
    if obj is None:
        return None

    if isinstance(obj, list):
        cleaned = (remove_empty_fields(item) for item in obj)
        return [item for item in cleaned if not _is_empty(item)]

    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            processed = remove_empty_fields(value)
            if not _is_empty(processed):
                result[key] = processed
        return result or None

    return obj
