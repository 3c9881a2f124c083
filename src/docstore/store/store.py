"""Tree-indexed document store.

Each file is stored in a tree of dicts where directories and file names
become keys. ``en/entity/node/article/40000/41234.json`` ends up at::

    store.data["en"]["entity"]["node"]["article"]["40000"]["41234.json"]

Every level also owns a ``_json`` index listing, recursively, every
document below it, so ``store.data["en"]["entity"]["node"]["article"]["_json"]["main"]``
holds all articles and ``...["_json"]["variants"]["teaser"]`` all teasers.
Queries can therefore run on any subtree without scanning the rest.

Full rebuilds go into ``stage`` and are swapped in with ``promote_stage()``.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

from docstore.files import FileContents, read_file
from docstore.store.index import (
    FILENAME_KEY,
    JSON_ITEMS,
    add_to_index,
    is_indexable,
    is_node,
    meets_path_requirements,
    new_node,
    remove_from_index,
)

if TYPE_CHECKING:
    from docstore.cache import Cache
    from docstore.modules import ModuleRegistry

logger = logging.getLogger(__name__)

FILE_CACHE = "file"


def split_path(file: str | None) -> list[str]:
    return [part for part in (file or "").split("/") if part]


class Store:
    """In-memory tree of documents with per-level indices."""

    def __init__(
        self,
        cache: Cache,
        modules: ModuleRegistry | None = None,
        post_processor: str | None = None,
    ) -> None:
        self.cache = cache
        self.modules = modules
        self.post_processor = post_processor
        self.data: dict = new_node()
        self.stage: dict = new_node()
        self.updated: datetime | None = None

    # ── Mutations ────────────────────────────────────────────

    def add(
        self,
        base_dir: str | Path,
        file: str,
        *,
        use_stage: bool = False,
        use_cache: bool = False,
    ) -> None:
        """Read a file and place it into the live (or staging) tree."""
        parts = split_path(file)
        if not parts:
            return
        file = "/".join(parts)
        if not meets_path_requirements(parts):
            logger.warning(
                'Skipping file "%s" since it contains "%s", a reserved name. Please, rename it.',
                file,
                JSON_ITEMS,
            )
            return

        contents = self._read(Path(base_dir) / file, use_cache)
        if contents is None:
            return
        raw, parsed = contents.raw, contents.parsed

        post_processor = self._post_processor()
        process_file = getattr(post_processor, "process_file", None)
        if process_file:
            result = process_file(base_dir=base_dir, file=file, raw=raw, parsed=parsed, store=self)
            raw, parsed = result["raw"], result["parsed"]

        if is_indexable(parsed):
            parsed[FILENAME_KEY] = file

        root = self.stage if use_stage else self.data
        if self._lookup(root, parts) is not None:
            self._unindex(root, parts, file)

        # Directories get their node before indexing, so a directory holding
        # only raw files still has an empty, well-formed index.
        add_to_index(root, file, parsed)
        leaf = root
        for part in parts[:-1]:
            child = leaf.get(part)
            if not is_node(child):
                child = leaf[part] = new_node()
            add_to_index(child, file, parsed)
            leaf = child
        leaf[parts[-1]] = parsed if parsed is not None else raw
        self.updated = datetime.now()

        store_add = getattr(post_processor, "store_add", None)
        if store_add:
            store_add(base_dir=base_dir, file=file, raw=raw, parsed=parsed, store=self)

    def remove(self, file: str) -> None:
        """Remove a file from the live tree and from every index it is in."""
        parts = split_path(file)
        if not parts:
            return
        file = "/".join(parts)
        self._unindex(self.data, parts, file, delete_leaf=True)
        self.updated = datetime.now()

        store_remove = getattr(self._post_processor(), "store_remove", None)
        if store_remove:
            store_remove(file=file, store=self)

    def update(self, base_dir: str | Path, file: str) -> None:
        """Remove then re-add a file. Readers may briefly see it missing."""
        self.remove(file)
        self.add(base_dir, file)

    def promote_stage(self) -> None:
        """Swap the staging tree in as the live tree and reset staging."""
        self.data = self.stage
        self.stage = new_node()
        self.updated = datetime.now()
        logger.info("Promoted stage (%d documents)", len(self.data[JSON_ITEMS]["main"]))

    # ── Lookups ──────────────────────────────────────────────

    def get(self, file: str | None) -> Any | None:
        """Document or tree node at a path, or None if any segment is missing."""
        return self._lookup(self.data, split_path(file))

    def index(self, path: str | None = "") -> dict | None:
        """The ``_json`` index of the node at path."""
        node = self.get(path)
        return node[JSON_ITEMS] if is_node(node) else None

    # ── Internals ────────────────────────────────────────────

    def _read(self, file_path: Path, use_cache: bool) -> FileContents | None:
        key = str(file_path)
        contents = self.cache.get(FILE_CACHE, key) if use_cache else None
        if contents is None:
            try:
                contents = read_file(file_path)
            except OSError as e:
                logger.error("Cannot read %s: %s", file_path, e)
                return None
            self.cache.set(FILE_CACHE, key, contents)
        # Documents get mutated once stored; keep the cached copy pristine.
        return FileContents(raw=contents.raw, parsed=copy.deepcopy(contents.parsed))

    def _post_processor(self) -> ModuleType | None:
        if not self.post_processor or self.modules is None:
            return None
        return self.modules.get(self.post_processor)

    @staticmethod
    def _lookup(root: dict, parts: list[str]) -> Any | None:
        node: Any = root
        for part in parts:
            if not isinstance(node, dict):
                return None
            node = node.get(part)
            if node is None:
                return None
        return node

    @staticmethod
    def _unindex(root: dict, parts: list[str], file: str, delete_leaf: bool = False) -> None:
        """Remove ``file`` from the root index and each directory level below.

        Descends through directory segments only; stops quietly at the
        first missing one.
        """
        remove_from_index(root, file)
        leaf = root
        for part in parts[:-1]:
            child = leaf.get(part)
            if not is_node(child):
                return
            remove_from_index(child, file)
            leaf = child
        if delete_leaf and not is_node(leaf.get(parts[-1])):
            leaf.pop(parts[-1], None)
