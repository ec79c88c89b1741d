"""PocketBase filter expression builder."""

from __future__ import annotations


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def equals(**fields: str) -> str:
    """Build ``field="value" && field2="value2"`` from keyword arguments, in order."""
    if not fields:
        raise ValueError("at least one field is required")
    return " && ".join(f"{name}={quote(value)}" for name, value in fields.items())
