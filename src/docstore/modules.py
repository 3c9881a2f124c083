"""Hot-reloadable registry of extension modules.

Extension modules are query handlers and the optional post-processor.
A module id is either a path to a ``.py`` file or a dotted import name.
File modules are executed fresh on every load, so a long-lived process
always sees the latest version on disk.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.machinery
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

from docstore.files import find_files

if TYPE_CHECKING:
    from docstore.config import DocStoreConfig

logger = logging.getLogger(__name__)


class LoadError(Exception):
    """A module could not be resolved or produced no usable handle."""


def _is_file_module(module_id: str) -> bool:
    return module_id.endswith(".py") or "/" in module_id or "\\" in module_id


def _synthetic_name(path: Path) -> str:
    """Stable sys.modules name for a module loaded from a file path."""
    digest = hashlib.sha1(str(path).encode()).hexdigest()[:12]
    return f"docstore_ext_{path.stem}_{digest}"


class _SourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that never writes ``__pycache__`` entries for extensions."""

    def set_data(self, path, data, *, _mode=0o666):
        pass


class ModuleRegistry:
    """Loads, caches, reloads and evicts extension modules."""

    def __init__(self, config: DocStoreConfig | None = None) -> None:
        self.config = config
        self._modules: dict[str, ModuleType] = {}
        self._owned: dict[str, str] = {}  # module id → sys.modules name we created

    def init(self) -> None:
        """Eagerly load every configured query module and the post-processor."""
        if self.config is None:
            return
        if self.config.query_dir:
            query_dir = Path(self.config.query_dir).resolve()
            for rel in find_files(query_dir, self.config.query_glob):
                self.load(str(query_dir / rel))
        if self.config.post_processor:
            self.load(self.config.post_processor)
        logger.info("Module registry initialized (%d modules)", len(self._modules))

    def load(self, module_id: str) -> ModuleType:
        """(Re)load a module, discarding any cached handle first."""
        self._modules.pop(module_id, None)
        if _is_file_module(module_id):
            module = self._load_file(module_id)
        else:
            module = self._load_dotted(module_id)
        if module is None:
            raise LoadError(f"Module '{module_id}' not loaded.")
        self._modules[module_id] = module
        logger.debug("Load for %s done.", module_id)
        return module

    def get(self, module_id: str) -> ModuleType:
        module = self._modules.get(module_id)
        if module is None:
            module = self.load(module_id)
        return module

    def remove(self, module_id: str) -> None:
        """Evict a cached module without loading it again."""
        self._modules.pop(module_id, None)
        owned = self._owned.pop(module_id, None)
        if owned:
            sys.modules.pop(owned, None)
        logger.debug("Remove for %s done.", module_id)

    def loaded(self) -> list[str]:
        return sorted(self._modules)

    # ── Loaders ──────────────────────────────────────────────

    def _load_file(self, module_id: str) -> ModuleType | None:
        path = Path(module_id).expanduser().resolve()
        if not path.is_file():
            raise LoadError(f"Module file not found: {path}")

        name = _synthetic_name(path)
        importlib.invalidate_caches()
        spec = importlib.util.spec_from_file_location(
            name, path, loader=_SourceLoader(name, str(path))
        )
        if spec is None or spec.loader is None:
            raise LoadError(f"Cannot create import spec for {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(name, None)
            self._owned.pop(module_id, None)
            raise LoadError(f"Error executing module {path}: {e}") from e
        self._owned[module_id] = name
        return module

    def _load_dotted(self, module_id: str) -> ModuleType | None:
        try:
            if module_id in sys.modules:
                return importlib.reload(sys.modules[module_id])
            return importlib.import_module(module_id)
        except Exception as e:
            raise LoadError(f"Cannot import module '{module_id}': {e}") from e
