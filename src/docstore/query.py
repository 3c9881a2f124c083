"""Query runner protocol and the module-backed runner.

A query module is a ``.py`` file under the query directory exposing::

    def run(params: dict, store: Store): ...

``relatedArticles?tag=foo`` runs ``<query_dir>/relatedArticles.py``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from docstore.modules import LoadError

if TYPE_CHECKING:
    from docstore.modules import ModuleRegistry
    from docstore.store import Store

logger = logging.getLogger(__name__)


@runtime_checkable
class QueryRunner(Protocol):
    """Protocol that every query runner must implement."""

    def run(self, query_id: str, params: dict[str, Any]) -> Any:
        """Execute a query and return its data."""
        ...


class ModuleQueryRunner:
    """Runs queries implemented as extension modules in a directory."""

    def __init__(self, registry: ModuleRegistry, query_dir: Path | None, store: Store) -> None:
        self.registry = registry
        self.query_dir = Path(query_dir).resolve() if query_dir else None
        self.store = store

    def module_path(self, query_id: str) -> Path:
        if self.query_dir is None:
            raise LoadError(f"No query directory configured for query '{query_id}'")
        path = (self.query_dir / f"{query_id}.py").resolve()
        if not path.is_relative_to(self.query_dir):
            raise ValueError(f"Query id '{query_id}' points outside the query directory")
        return path

    def run(self, query_id: str, params: dict[str, Any]) -> Any:
        module = self.registry.get(str(self.module_path(query_id)))
        handler = getattr(module, "run", None)
        if not callable(handler):
            raise LoadError(f"Query module '{query_id}' has no run() function")
        logger.debug("Running query %s with %s", query_id, params)
        return handler(params, store=self.store)
