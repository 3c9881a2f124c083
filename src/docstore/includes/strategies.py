"""Mounting strategies for resolved include data.

A strategy turns one resolved reference into patches against the
including document. It never mutates the document itself.

Mounted values are the store's own objects, not copies, so a reference
resolved later in the same load shows through every document embedding it.

Given ``data.content.menuConfigInclude = "en/config/menu.json"``:

- the mount path is ``data.content``
- the include key is ``menuConfigInclude``
- the include data is whatever the store holds at ``en/config/menu.json``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from docstore.includes.objects import Patch

logger = logging.getLogger(__name__)

INCLUDE_SUFFIX = "include"


@dataclass
class MountContext:
    """Everything a strategy needs to know about one reference."""

    include_data: Any
    mount_path: tuple[str, ...]
    include_key: str


class MountStrategy(Protocol):
    def patches(self, ctx: MountContext) -> list[Patch]: ...


def inner_content(include_data: Any) -> Any | None:
    """``include_data["data"]["content"]``, or None if the shape doesn't match."""
    if not isinstance(include_data, dict):
        return None
    data = include_data.get("data")
    if not isinstance(data, dict):
        return None
    return data.get("content")


class EntityIncludeStrategy:
    """Replace the whole mount point with the entity's inner content."""

    def patches(self, ctx: MountContext) -> list[Patch]:
        if not ctx.mount_path:
            logger.warning("Entity include '%s' has no mount point, dropping it", ctx.include_key)
            return [Patch(path=(ctx.include_key,), delete=True)]
        return [Patch(path=ctx.mount_path, value=inner_content(ctx.include_data))]


class AliasWithoutTypeStrategy:
    """Mount next to the include key, under its alias minus the type word.

    ``mainMenuConfigInclude`` mounts at ``mainMenu``; a bare ``configInclude``
    mounts at ``config``. The include key is removed. Nothing is mounted
    when there is no data.
    """

    def __init__(self, type: str, unwrap: bool = True) -> None:
        self.type = type
        self.unwrap = unwrap

    def alias(self, include_key: str) -> str:
        suffix_len = len(self.type) + len(INCLUDE_SUFFIX)
        return include_key[:-suffix_len] or self.type

    def value(self, include_data: Any) -> Any | None:
        return inner_content(include_data) if self.unwrap else include_data

    def patches(self, ctx: MountContext) -> list[Patch]:
        patches = [Patch(path=ctx.mount_path + (ctx.include_key,), delete=True)]
        value = self.value(ctx.include_data)
        if value is None:
            logger.debug("No %s data for '%s'", self.type, ctx.include_key)
            return patches
        alias = self.alias(ctx.include_key)
        patches.append(Patch(path=ctx.mount_path + (alias,), value=value))
        return patches


class AliasWithTypeStrategy(AliasWithoutTypeStrategy):
    """Like AliasWithoutTypeStrategy, but the alias keeps the type word.

    ``footerCustomInclude`` mounts at ``footerCustom`` and receives the
    resolved value as-is, raw text included.
    """

    def __init__(self, type: str) -> None:
        super().__init__(type, unwrap=False)

    def alias(self, include_key: str) -> str:
        return include_key[: -len(INCLUDE_SUFFIX)] or self.type


def default_static_strategies() -> dict[str, MountStrategy]:
    """Strategy table for statically addressed includes, keyed by key suffix."""
    return {
        "entityinclude": EntityIncludeStrategy(),
        "configinclude": AliasWithoutTypeStrategy("config"),
        "custominclude": AliasWithTypeStrategy("custom"),
        "localeinclude": AliasWithoutTypeStrategy("locale"),
    }


QUERY_STRATEGY = AliasWithoutTypeStrategy("query", unwrap=False)
