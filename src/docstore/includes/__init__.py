from docstore.includes.objects import Patch, apply_patches, get_value, set_value
from docstore.includes.resolver import IncludeResolver, parse_params, parse_query
from docstore.includes.strategies import (
    AliasWithTypeStrategy,
    AliasWithoutTypeStrategy,
    EntityIncludeStrategy,
    MountContext,
    MountStrategy,
)

__all__ = [
    "AliasWithTypeStrategy",
    "AliasWithoutTypeStrategy",
    "EntityIncludeStrategy",
    "IncludeResolver",
    "MountContext",
    "MountStrategy",
    "Patch",
    "apply_patches",
    "get_value",
    "parse_params",
    "parse_query",
    "set_value",
]
