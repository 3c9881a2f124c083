"""Configuration loading from environment variables and docstore.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "docstore.toml"


@dataclass
class DocStoreConfig:
    """Top-level docstore configuration."""

    data_dir: Path = Path("data")
    data_glob: str = "**/*"
    query_dir: Path | None = None
    query_glob: str = "**/*.py"
    post_processor: str | None = None
    use_cache: bool = False
    log_level: str = "INFO"
    log_file: Path | None = None
    log_file_level: str = "WARNING"


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def _flag(value) -> bool:
    return str(value).lower() in ("1", "true", "yes")


def load_config(config_path: Path | None = None) -> DocStoreConfig:
    """Load configuration from environment variables and optional docstore.toml.

    Priority: environment variables > docstore.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.docstore/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".docstore" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    data = file_data.get("data", {})
    query = file_data.get("query", {})
    log = file_data.get("log", {})

    return DocStoreConfig(
        data_dir=Path(os.getenv("DOCSTORE_DATA_DIR", data.get("dir", "data"))),
        data_glob=data.get("glob", "**/*"),
        query_dir=_optional_path(os.getenv("DOCSTORE_QUERY_DIR", query.get("dir"))),
        query_glob=query.get("glob", "**/*.py"),
        post_processor=os.getenv("DOCSTORE_POST_PROCESSOR", data.get("post_processor")) or None,
        use_cache=_flag(os.getenv("DOCSTORE_USE_CACHE", data.get("use_cache", False))),
        log_level=os.getenv("DOCSTORE_LOG_LEVEL", log.get("level", "INFO")),
        log_file=_optional_path(os.getenv("DOCSTORE_LOG_FILE", log.get("file"))),
        log_file_level=os.getenv("DOCSTORE_LOG_FILE_LEVEL", log.get("file_level", "WARNING")),
    )
