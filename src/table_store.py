"""Dotted-path lookups into loaded list data."""

from typing import Any


_MISSING = object()


def resolve_path(store: Any, path: str) -> Any:
    """
    Walk a nested mapping one dotted segment at a time.

    Args:
        store: Nested mapping of tables (as produced by the YAML loader)
        path: Dotted path such as "weapon.melee"

    Returns:
        The value at the path, or None if any segment is missing or an
        intermediate value is not a mapping
    """
    current = store
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return None
    return current


def resolve_list(store: Any, path: str) -> list | None:
    """Return the list at path, or None when it is absent or not a list."""
    value = resolve_path(store, path)
    if isinstance(value, list):
        return value
    return None
