"""docstore orchestrator. Owns the single shared instance of every component.

Responsibilities:
1. Build the cache, module registry, store, query runner and include resolver
2. Full loads: stage every data file, promote, then resolve includes
3. Incremental changes: add / update / remove one file on the live tree
4. Hot reload of extension modules
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from docstore.cache import Cache
from docstore.config import DocStoreConfig
from docstore.files import find_files
from docstore.includes import IncludeResolver
from docstore.modules import ModuleRegistry
from docstore.query import ModuleQueryRunner
from docstore.store import FILENAME_KEY, JSON_ITEMS, MAIN, VARIANTS, Store
from docstore.store.store import FILE_CACHE

logger = logging.getLogger(__name__)


class DocStore:
    """Composition root: one cache, registry, store and resolver per process."""

    def __init__(self, config: DocStoreConfig) -> None:
        self.config = config
        self.cache = Cache()
        self.modules = ModuleRegistry(config)
        self.store = Store(self.cache, self.modules, config.post_processor)
        self.query_runner = ModuleQueryRunner(self.modules, config.query_dir, self.store)
        self.includes = IncludeResolver(self.store, self.query_runner)

    # ── Lifecycle ─────────────────────────────────────────────

    def init(self) -> None:
        """Load extension modules up front so broken ones fail at startup."""
        self.modules.init()

    def reload_module(self, module_id: str) -> None:
        self.modules.load(module_id)
        logger.info("Reloaded module: %s", module_id)

    # ── Full load ────────────────────────────────────────────

    def load_all(self, files: Iterable[str] | None = None) -> int:
        """Rebuild the store from the data directory. Returns files added."""
        if files is None:
            files = find_files(self.config.data_dir, self.config.data_glob)

        added = 0
        for file in files:
            self.store.add(
                self.config.data_dir,
                file,
                use_stage=True,
                use_cache=self.config.use_cache,
            )
            added += 1
        self.store.promote_stage()

        documents = self._all_documents()
        for document in documents:
            self._resolve(document, self.includes.resolve_static)
        for document in documents:
            self._resolve(document, self.includes.resolve_dynamic)

        logger.info("Loaded %d files (%d indexed documents)", added, len(documents))
        return added

    # ── Incremental changes ──────────────────────────────────

    def add_file(self, file: str) -> None:
        self.store.add(self.config.data_dir, file, use_cache=self.config.use_cache)
        self._resolve_file(file)

    def update_file(self, file: str) -> None:
        self.store.update(self.config.data_dir, file)
        self._resolve_file(file)

    def remove_file(self, file: str) -> None:
        self.cache.remove(FILE_CACHE, str(self.config.data_dir / file))
        self.store.remove(file)

    def get(self, file: str | None) -> Any | None:
        return self.store.get(file)

    # ── Internals ────────────────────────────────────────────

    def _all_documents(self) -> list[dict]:
        index = self.store.data[JSON_ITEMS]
        documents = list(index[MAIN])
        for variant_docs in index[VARIANTS].values():
            documents.extend(variant_docs)
        return documents

    def _resolve_file(self, file: str) -> None:
        document = self.store.get(file)
        if isinstance(document, dict):
            self._resolve(document, self.includes.resolve)

    def _resolve(self, document: dict, resolve) -> None:
        """Run one resolution pass; a failing document is logged and left as is."""
        try:
            resolve(document)
        except Exception:
            logger.exception(
                "Include resolution failed for %s", document.get(FILENAME_KEY, "<unknown>")
            )
