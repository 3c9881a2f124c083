"""Tests for the DocStore orchestrator."""

import json
import logging
from pathlib import Path

import pytest

from docstore.config import DocStoreConfig
from docstore.core import DocStore
from docstore.modules import LoadError

ARTICLE = "en/node/article/1.json"
PAGE = "en/node/page/2.json"


def write_json(data_dir: Path, file: str, data) -> None:
    path = data_dir / file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def config(tmp_path: Path) -> DocStoreConfig:
    data_dir = tmp_path / "data"
    query_dir = tmp_path / "queries"
    query_dir.mkdir()
    (query_dir / "byType.py").write_text(
        "def run(params, store):\n"
        "    docs = store.index('en/node/' + params['type'])['main']\n"
        "    return [d['data']['content']['title'] for d in docs]\n",
        encoding="utf-8",
    )
    write_json(data_dir, ARTICLE, {"data": {"content": {"title": "Article"}}})
    write_json(data_dir, "en/node/article/1--teaser.json",
               {"data": {"content": {"title": "Teaser"}}})
    write_json(data_dir, PAGE, {
        "data": {"content": {
            "title": "Page",
            "hero": {"entityInclude": ARTICLE},
            "articlesQueryInclude": "byType?type=article",
        }},
        "metadata": {"includes": [
            "data.content.hero.entityInclude",
            "data.content.articlesQueryInclude",
        ]},
    })
    return DocStoreConfig(data_dir=data_dir, query_dir=query_dir)


@pytest.fixture
def docstore(config: DocStoreConfig) -> DocStore:
    d = DocStore(config)
    d.init()
    return d


class TestDocStore:
    def test_init_loads_query_modules(self, docstore: DocStore, config: DocStoreConfig):
        assert str((config.query_dir / "byType.py").resolve()) in docstore.modules.loaded()

    def test_load_all(self, docstore: DocStore):
        assert docstore.load_all() == 3
        assert len(docstore.store.index("")["main"]) == 2
        assert len(docstore.store.index("")["variants"]["teaser"]) == 1
        assert docstore.store.stage["_json"]["main"] == []

    def test_load_all_resolves_includes(self, docstore: DocStore):
        docstore.load_all()
        content = docstore.get(PAGE)["data"]["content"]
        assert content["hero"] == {"title": "Article"}
        assert content["articles"] == ["Article"]
        assert "articlesQueryInclude" not in content

    def test_nested_includes_resolve_regardless_of_order(self, docstore: DocStore,
                                                         config: DocStoreConfig):
        write_json(config.data_dir, "a/page.json", {
            "data": {"content": {"article": {"entityInclude": "b/article.json"}}},
            "metadata": {"includes": ["data.content.article.entityInclude"]},
        })
        write_json(config.data_dir, "b/article.json", {
            "data": {"content": {"title": "A", "author": {"entityInclude": "c/user.json"}}},
            "metadata": {"includes": ["data.content.author.entityInclude"]},
        })
        write_json(config.data_dir, "c/user.json", {"data": {"content": {"name": "Ann"}}})

        docstore.load_all(["a/page.json", "b/article.json", "c/user.json"])

        article = docstore.get("a/page.json")["data"]["content"]["article"]
        assert article == {"title": "A", "author": {"name": "Ann"}}
        assert docstore.get("b/article.json")["data"]["content"]["author"] == {"name": "Ann"}

    def test_failed_resolution_is_logged(self, docstore: DocStore, config: DocStoreConfig, caplog):
        (config.query_dir / "byType.py").unlink()
        docstore.modules.remove(str((config.query_dir / "byType.py").resolve()))
        with caplog.at_level(logging.ERROR, logger="docstore.core"):
            docstore.load_all()
        assert "Include resolution failed" in caplog.text
        content = docstore.get(PAGE)["data"]["content"]
        # Static includes were still resolved
        assert content["hero"] == {"title": "Article"}
        assert content["articlesQueryInclude"] == "byType?type=article"

    def test_add_file_resolves(self, docstore: DocStore):
        docstore.add_file(ARTICLE)
        docstore.add_file(PAGE)
        assert docstore.get(PAGE)["data"]["content"]["hero"] == {"title": "Article"}

    def test_update_file(self, docstore: DocStore, config: DocStoreConfig):
        docstore.load_all()
        write_json(config.data_dir, ARTICLE, {"data": {"content": {"title": "Changed"}}})
        docstore.update_file(ARTICLE)
        assert docstore.get(ARTICLE)["data"]["content"]["title"] == "Changed"
        assert len(docstore.store.index("en")["main"]) == 2

    def test_remove_file(self, docstore: DocStore):
        docstore.load_all()
        docstore.remove_file(ARTICLE)
        assert docstore.get(ARTICLE) is None
        assert docstore.cache.count_items("file") == 2

    def test_reload_module(self, docstore: DocStore, config: DocStoreConfig):
        path = config.query_dir / "byType.py"
        path.write_text("def run(params, store):\n    return 'reloaded'\n", encoding="utf-8")
        docstore.reload_module(str(path.resolve()))
        assert docstore.query_runner.run("byType", {}) == "reloaded"

    def test_broken_post_processor_fails_init(self, config: DocStoreConfig, tmp_path: Path):
        config.post_processor = str(tmp_path / "missing_post.py")
        with pytest.raises(LoadError):
            DocStore(config).init()
