"""Tests for the extension module registry."""

import logging
import sys
from pathlib import Path

import pytest

from docstore.config import DocStoreConfig
from docstore.modules import LoadError, ModuleRegistry


def _write_module(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture
def registry() -> ModuleRegistry:
    return ModuleRegistry()


class TestLoad:
    def test_load_file_module(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 1\n")
        module = registry.load(str(path))
        assert module.VALUE == 1
        assert registry.loaded() == [str(path)]

    def test_load_dotted_module(self, registry: ModuleRegistry):
        module = registry.load("colorsys")
        assert module is sys.modules["colorsys"]

    def test_reload_picks_up_changes(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 1\n")
        registry.load(str(path))
        _write_module(path, "VALUE = 2  # changed\n")
        assert registry.get(str(path)).VALUE == 1  # cached until reloaded
        assert registry.load(str(path)).VALUE == 2
        assert registry.get(str(path)).VALUE == 2

    def test_reload_same_size_edit(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 1\n")
        registry.load(str(path))
        _write_module(path, "VALUE = 2\n")
        assert registry.load(str(path)).VALUE == 2
        assert not (tmp_path / "__pycache__").exists()

    def test_missing_file_raises(self, registry: ModuleRegistry, tmp_path: Path):
        with pytest.raises(LoadError):
            registry.load(str(tmp_path / "missing.py"))

    def test_missing_dotted_raises(self, registry: ModuleRegistry):
        with pytest.raises(LoadError):
            registry.load("docstore_no_such_module_xyz")

    def test_broken_module_raises_with_cause(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "broken.py", "raise RuntimeError('boom')\n")
        with pytest.raises(LoadError) as excinfo:
            registry.load(str(path))
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_failed_reload_leaves_no_stale_entry(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 1\n")
        registry.load(str(path))
        _write_module(path, "this is not python\n")
        with pytest.raises(LoadError):
            registry.load(str(path))
        assert registry.loaded() == []

    def test_load_logs_debug(self, registry: ModuleRegistry, tmp_path: Path, caplog):
        path = _write_module(tmp_path / "q.py", "VALUE = 1\n")
        with caplog.at_level(logging.DEBUG, logger="docstore.modules"):
            registry.load(str(path))
        assert "Load for" in caplog.text


class TestGetRemove:
    def test_get_loads_on_miss(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 3\n")
        assert registry.get(str(path)).VALUE == 3

    def test_get_returns_cached_handle(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 3\n")
        first = registry.get(str(path))
        assert registry.get(str(path)) is first

    def test_remove_evicts(self, registry: ModuleRegistry, tmp_path: Path):
        path = _write_module(tmp_path / "q.py", "VALUE = 3\n")
        first = registry.get(str(path))
        registry.remove(str(path))
        assert registry.loaded() == []
        assert registry.get(str(path)) is not first

    def test_remove_unknown_is_noop(self, registry: ModuleRegistry):
        registry.remove("never/loaded.py")


class TestInit:
    def test_loads_queries_and_post_processor(self, tmp_path: Path):
        query_dir = tmp_path / "queries"
        _write_module(query_dir / "a.py", "def run(params, store): return 'a'\n")
        _write_module(query_dir / "nested" / "b.py", "def run(params, store): return 'b'\n")
        post = _write_module(tmp_path / "post.py", "def process_file(**kw): return kw\n")

        registry = ModuleRegistry(
            DocStoreConfig(query_dir=query_dir, post_processor=str(post))
        )
        registry.init()

        loaded = registry.loaded()
        assert str(query_dir.resolve() / "a.py") in loaded
        assert str(query_dir.resolve() / "nested" / "b.py") in loaded
        assert str(post) in loaded

    def test_init_fails_on_broken_module(self, tmp_path: Path):
        query_dir = tmp_path / "queries"
        _write_module(query_dir / "bad.py", "import docstore_no_such_module_xyz\n")
        registry = ModuleRegistry(DocStoreConfig(query_dir=query_dir))
        with pytest.raises(LoadError):
            registry.init()

    def test_init_without_config(self, registry: ModuleRegistry):
        registry.init()
        assert registry.loaded() == []
