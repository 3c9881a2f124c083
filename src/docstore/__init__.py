"""docstore: in-memory, path-indexed document store with include resolution."""

__version__ = "0.1.0"
