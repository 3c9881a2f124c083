"""Two-level memoization table: namespace → key → value.

No expiry and no size bound. Callers coordinate access.
"""

from __future__ import annotations

from typing import Any


class Cache:
    """In-process cache grouped by namespace."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def set(self, namespace: str, key: str, value: Any) -> None:
        self._data.setdefault(namespace, {})[key] = value

    def get(self, namespace: str, key: str) -> Any | None:
        return self._data.get(namespace, {}).get(key)

    def remove(self, namespace: str, key: str) -> None:
        self._data.get(namespace, {}).pop(key, None)

    def count_items(self, namespace: str) -> int:
        return len(self._data.get(namespace, {}))

    def reset(self, namespace: str) -> None:
        """Drop every entry in a namespace."""
        self._data[namespace] = {}
