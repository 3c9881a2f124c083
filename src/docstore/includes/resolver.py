"""Include resolution: embed referenced content into a document.

A document declares its references as dot paths under ``metadata.includes``::

    {
      "data": {"content": {"author": {"entityInclude": "en/user/7.json"},
                           "relatedQueryInclude": "relatedArticles?tag=foo"}},
      "metadata": {"includes": ["data.content.author.entityInclude",
                                "data.content.relatedQueryInclude"]}
    }

The static pass looks each referenced path up in the store and mounts it
with the strategy matching the include key's suffix. The dynamic pass runs
``*QueryInclude`` references through the query runner.

Each pass computes every patch first and applies them afterwards, so an
exception raised mid-pass (from a query runner, typically) leaves the
document untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

from docstore.includes.objects import Patch, apply_patches, get_value
from docstore.includes.strategies import (
    QUERY_STRATEGY,
    MountContext,
    MountStrategy,
    default_static_strategies,
)

if TYPE_CHECKING:
    from docstore.query import QueryRunner
    from docstore.store import Store

logger = logging.getLogger(__name__)

QUERY_INCLUDE_SUFFIX = "queryinclude"


def parse_params(query_string: str) -> dict[str, Any]:
    """Decode a query string; repeated keys become lists, others scalars."""
    parsed = parse_qs(query_string, keep_blank_values=True)
    return {key: values if len(values) > 1 else values[0] for key, values in parsed.items()}


def parse_query(value: str) -> tuple[str, dict[str, Any]]:
    """``"relatedArticles?tag=foo"`` → ``("relatedArticles", {"tag": "foo"})``."""
    query_id, _, query_string = value.partition("?")
    return query_id, parse_params(query_string) if query_string else {}


def declared_includes(document: Any) -> list[str]:
    """Reference paths listed under ``metadata.includes``, in order."""
    includes = get_value(document, ["metadata", "includes"])
    if not isinstance(includes, list):
        return []
    return [path for path in includes if isinstance(path, str) and path]


def split_include_path(include_path: str) -> tuple[tuple[str, ...], str]:
    """``"a.b.fooInclude"`` → ``(("a", "b"), "fooInclude")``."""
    *mount_path, include_key = include_path.split(".")
    return tuple(mount_path), include_key


class IncludeResolver:
    """Resolves static and query-driven includes against a store."""

    def __init__(
        self,
        store: Store,
        query_runner: QueryRunner | None = None,
        strategies: dict[str, MountStrategy] | None = None,
    ) -> None:
        self.store = store
        self.query_runner = query_runner
        self.strategies = strategies if strategies is not None else default_static_strategies()

    def register(self, suffix: str, strategy: MountStrategy) -> None:
        """Add (or replace) the strategy for include keys ending in ``suffix``."""
        self.strategies[suffix.lower()] = strategy

    def strategy_for(self, include_key: str) -> MountStrategy | None:
        key = include_key.lower()
        # Longest suffix first, so a specific suffix wins over a generic one.
        for suffix in sorted(self.strategies, key=len, reverse=True):
            if key.endswith(suffix):
                return self.strategies[suffix]
        return None

    def resolve(self, document: Any) -> None:
        self.resolve_static(document)
        self.resolve_dynamic(document)

    def resolve_static(self, document: Any) -> None:
        patches: list[Patch] = []
        for include_path in declared_includes(document):
            mount_path, include_key = split_include_path(include_path)
            if include_key.lower().endswith(QUERY_INCLUDE_SUFFIX):
                continue
            strategy = self.strategy_for(include_key)
            if strategy is None:
                continue
            target = get_value(document, include_path)
            if target is None:
                logger.debug("Include '%s' already resolved or missing", include_path)
                continue
            include_data = self.store.get(target) if isinstance(target, str) else None
            if include_data is None:
                logger.debug("Include '%s' → '%s' not found in store", include_path, target)
            patches.extend(
                strategy.patches(
                    MountContext(
                        include_data=include_data,
                        mount_path=mount_path,
                        include_key=include_key,
                    )
                )
            )
        apply_patches(document, patches)

    def resolve_dynamic(self, document: Any) -> None:
        patches: list[Patch] = []
        for include_path in declared_includes(document):
            mount_path, include_key = split_include_path(include_path)
            if not include_key.lower().endswith(QUERY_INCLUDE_SUFFIX):
                continue
            value = get_value(document, include_path)
            if not isinstance(value, str):
                continue
            if self.query_runner is None:
                raise RuntimeError(f"No query runner configured for include '{include_path}'")
            query_id, params = parse_query(value)
            include_data = self.query_runner.run(query_id, params)
            patches.extend(
                QUERY_STRATEGY.patches(
                    MountContext(
                        include_data=include_data,
                        mount_path=mount_path,
                        include_key=include_key,
                    )
                )
            )
        apply_patches(document, patches)
