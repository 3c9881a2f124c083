"""Path-indexed document store.

Layout of ``Store.data`` for two ingested files::

    {
      "_json": {"main": [a], "variants": {"teaser": [b]}},
      "en": {
        "_json": {"main": [a], "variants": {"teaser": [b]}},
        "41234.json": a,
        "41234--teaser.json": b,
      },
    }
"""

from docstore.store.index import FILENAME_KEY, JSON_ITEMS, MAIN, VARIANTS
from docstore.store.store import Store

__all__ = ["FILENAME_KEY", "JSON_ITEMS", "MAIN", "VARIANTS", "Store"]
