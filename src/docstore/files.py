"""File ingestion helpers: reading, parsing, variant naming, discovery.

Exported data files are JSON. Markdown files with YAML frontmatter are
parsed the same way entity files are: frontmatter becomes ``metadata``
and the body becomes ``content``. Anything else stays raw text.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import frontmatter

logger = logging.getLogger(__name__)

VARIANT_SEPARATOR = "--"


@dataclass
class FileContents:
    """Raw text of a file plus its structured form, if any."""

    raw: str | None
    parsed: Any | None = None


def parse_json(text: str, source: str = "") -> Any | None:
    """Parse a JSON string, returning None (and logging) on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s", source or "<string>", e)
        return None


def parse_frontmatter(text: str, source: str = "") -> dict | None:
    """Split YAML frontmatter from a markdown body. None if there is none."""
    try:
        post = frontmatter.loads(text)
    except Exception as e:
        logger.warning("Invalid frontmatter in %s: %s", source or "<string>", e)
        return None
    if not post.metadata:
        return None
    return {"metadata": dict(post.metadata), "content": post.content}


def parse_contents(raw: str, filename: str) -> Any | None:
    """Structured form of ``raw`` based on the file extension."""
    suffix = Path(filename).suffix.lower()
    if suffix == ".json":
        return parse_json(raw, filename)
    if suffix in (".md", ".markdown"):
        return parse_frontmatter(raw, filename)
    return None


def read_file(path: Path) -> FileContents:
    """Read a data file. Raises OSError when it cannot be read."""
    raw = path.read_text(encoding="utf-8")
    return FileContents(raw=raw, parsed=parse_contents(raw, path.name))


def variant_name(file: str) -> str | None:
    """Variant key of a data file: ``12345--card.json`` → ``card``."""
    stem = Path(file).name.split(".", 1)[0]
    if VARIANT_SEPARATOR not in stem:
        return None
    variant = stem.split(VARIANT_SEPARATOR, 1)[1]
    return variant or None


def find_files(base_dir: Path, pattern: str = "**/*") -> list[str]:
    """Relative POSIX paths of every file under base_dir matching pattern."""
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        return []
    return sorted(
        p.relative_to(base_dir).as_posix()
        for p in base_dir.glob(pattern)
        if p.is_file()
    )
