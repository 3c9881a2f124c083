"""Per-level document index helpers.

Every tree node is a dict that owns an index under ``JSON_ITEMS``::

    node["_json"] = {"main": [doc, ...], "variants": {"teaser": [doc, ...]}}

A document is listed at its own directory level and at every ancestor,
in ``main`` or in the ``variants`` group matching its file name.
"""

from __future__ import annotations

from typing import Any

from docstore.files import variant_name

JSON_ITEMS = "_json"
MAIN = "main"
VARIANTS = "variants"
FILENAME_KEY = "__FILENAME__"


def new_node() -> dict:
    """An empty tree node with a well-formed index."""
    return {JSON_ITEMS: {MAIN: [], VARIANTS: {}}}


def is_node(value: Any) -> bool:
    """A directory node built by the store, never a stored document.

    Documents may legitimately contain a ``_json`` key of their own, but
    every indexed document carries ``__FILENAME__`` and nodes never do.
    """
    return isinstance(value, dict) and JSON_ITEMS in value and FILENAME_KEY not in value


def is_indexable(document: Any) -> bool:
    """Only mapping documents can carry provenance and be indexed.

    Top-level JSON arrays and raw text are stored in the tree but left out of
    every ``_json`` index: removal matches index entries by ``__FILENAME__``,
    which they have nowhere to hold.
    """
    return isinstance(document, dict)


def meets_path_requirements(parts: list[str]) -> bool:
    return JSON_ITEMS not in parts


def add_to_index(node: dict, file: str, document: Any) -> None:
    """Append a document to a node's main list or its variant group."""
    if not is_indexable(document):
        return
    index = node.setdefault(JSON_ITEMS, {MAIN: [], VARIANTS: {}})
    variant = variant_name(file)
    if variant:
        index[VARIANTS].setdefault(variant, []).append(document)
    else:
        index[MAIN].append(document)


def remove_from_index(node: dict | None, file: str) -> None:
    """Drop the document whose provenance is ``file``; prune empty groups."""
    if not isinstance(node, dict) or JSON_ITEMS not in node:
        return
    index = node[JSON_ITEMS]
    variant = variant_name(file)
    if variant:
        items = index[VARIANTS].get(variant)
        if items is None:
            return
        _remove_by_filename(items, file)
        if not items:
            del index[VARIANTS][variant]
    else:
        _remove_by_filename(index[MAIN], file)


def _remove_by_filename(items: list, file: str) -> None:
    for i, item in enumerate(items):
        if isinstance(item, dict) and item.get(FILENAME_KEY) == file:
            del items[i]
            return

