"""Entry point: python -m docstore [load|get <path>]

- "load":       Load the data directory and print index counts (default)
- "get <path>": Load, then print the document or node at <path> as JSON
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from docstore.config import DocStoreConfig, load_config

if TYPE_CHECKING:
    from docstore.core import DocStore


def _setup_logging(config: DocStoreConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if config.log_file:
        _add_file_handler(config.log_file, config.log_file_level)


def _add_file_handler(log_file: Path, level: str) -> None:
    log_file = log_file.expanduser().resolve()
    if not os.access(log_file.parent, os.W_OK):
        logging.getLogger(__name__).error('Log file "%s" is not writable', log_file)
        raise PermissionError(f"Log file directory not writable: {log_file.parent}")
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(getattr(logging, level.upper(), logging.WARNING))
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    logging.getLogger().addHandler(handler)


def _build() -> DocStore:
    config = load_config()
    _setup_logging(config)

    from docstore.core import DocStore

    docstore = DocStore(config)
    docstore.init()
    docstore.load_all()
    return docstore


def _run_load() -> None:
    docstore = _build()
    index = docstore.store.index("")
    print(f"main: {len(index['main'])}")
    for name, docs in sorted(index["variants"].items()):
        print(f"variant {name}: {len(docs)}")


def _run_get(path: str) -> None:
    docstore = _build()
    item = docstore.get(path)
    if item is None:
        print(f"Not found: {path}", file=sys.stderr)
        sys.exit(1)
    if isinstance(item, str):
        print(item)
    else:
        print(json.dumps(item, ensure_ascii=False, indent=2, default=str))


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "load"

    if cmd == "load":
        _run_load()
    elif cmd == "get" and len(sys.argv) > 2:
        _run_get(sys.argv[2])
    else:
        print("Usage: python -m docstore [load|get <path>]")
        print("  load        Load the data directory and print index counts (default)")
        print("  get <path>  Print the document or node at <path> as JSON")
        sys.exit(1)


if __name__ == "__main__":
    main()
