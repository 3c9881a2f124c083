"""Dot-path access into nested documents, and patches applied through it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Patch:
    """A single change to a document: set ``value`` at ``path``, or delete it."""

    path: tuple[str, ...]
    value: Any = None
    delete: bool = False


def to_parts(path: str | list[str] | tuple[str, ...]) -> list[str]:
    if isinstance(path, str):
        return [part for part in path.split(".") if part]
    return list(path)


def _step(container: Any, part: str) -> Any:
    if isinstance(container, dict):
        return container.get(part)
    if isinstance(container, list) and part.isdigit():
        i = int(part)
        return container[i] if i < len(container) else None
    return None


def get_value(obj: Any, path: str | list[str] | tuple[str, ...]) -> Any | None:
    """Value at a dot path, or None if any segment is missing."""
    current = obj
    for part in to_parts(path):
        current = _step(current, part)
        if current is None:
            return None
    return current


def set_value(obj: dict, path: str | list[str] | tuple[str, ...], value: Any) -> None:
    """Set the value at a dot path, creating intermediate dicts as needed."""
    parts = to_parts(path)
    if not parts:
        raise ValueError("Cannot set a value at an empty path")
    current: Any = obj
    for part in parts[:-1]:
        child = _step(current, part)
        if not isinstance(child, (dict, list)):
            child = {}
            _assign(current, part, child)
        current = child
    _assign(current, parts[-1], value)


def delete_value(obj: dict, path: str | list[str] | tuple[str, ...]) -> None:
    """Delete the key at a dot path. Missing paths are ignored."""
    parts = to_parts(path)
    if not parts:
        return
    parent = get_value(obj, parts[:-1]) if len(parts) > 1 else obj
    if isinstance(parent, dict):
        parent.pop(parts[-1], None)


def apply_patches(obj: dict, patches: list[Patch]) -> None:
    for patch in patches:
        if patch.delete:
            delete_value(obj, patch.path)
        else:
            set_value(obj, patch.path, patch.value)


def _assign(container: Any, part: str, value: Any) -> None:
    if isinstance(container, list) and part.isdigit() and int(part) < len(container):
        container[int(part)] = value
    elif isinstance(container, dict):
        container[part] = value
    else:
        raise TypeError(f"Cannot assign '{part}' on {type(container).__name__}")
