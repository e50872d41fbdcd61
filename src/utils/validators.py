"""Lightweight validation helpers."""

from typing import Any


def ensure_text(value: Any, field: str) -> str:
    """Return the stripped string, rejecting non-strings and blank text."""
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field} is required")
    return cleaned
