from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from notion_blog import main as cli
from notion_blog.sources.base import MODE_NORMAL, MODE_PREVIEWS, Outcome, PostRecord, RenderNode


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("NOTION_TOKEN", "BLOG_INDEX_ID", "USE_CACHE", "BLOG_INDEX_CACHE", "SITE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_cache(monkeypatch):
    cache = Mock()
    cache.get_index.return_value = {
        "hello": PostRecord(id="p1", title="Hello", slug="hello", published=True, date="2024-01-02"),
    }
    monkeypatch.setattr(cli, "build_index_cache", lambda settings: cache)
    return cache


def test_index_command_lists_posts(fake_cache, capsys):
    assert cli.main(["index"]) == 0

    out = capsys.readouterr().out
    assert "hello" in out
    assert "1 posts" in out
    fake_cache.get_index.assert_called_once_with(MODE_NORMAL)
    fake_cache.close.assert_called_once()


def test_index_command_previews_json(fake_cache, capsys):
    assert cli.main(["index", "--previews", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["hello"]["Slug"] == "hello"
    fake_cache.get_index.assert_called_once_with(MODE_PREVIEWS)


def test_sitemap_command(fake_cache, tmp_path):
    out = tmp_path / "sitemap.xml"

    assert cli.main(["sitemap", "--out", str(out)]) == 0
    assert "/blog/hello" in out.read_text(encoding="utf-8")


def test_blocks_command(monkeypatch, capsys):
    monkeypatch.setenv("NOTION_TOKEN", "tok")
    monkeypatch.setattr(cli, "get_blocks", lambda client, page_id: [RenderNode(id="b", type="divider")])

    assert cli.main(["blocks", "page-1"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"value": {"id": "b", "type": "divider", "properties": {}}}]


def test_check_without_token(capsys):
    assert cli.main(["check"]) == 1
    assert "NOTION_TOKEN set: False" in capsys.readouterr().out


def test_check_reports_failure(monkeypatch, capsys):
    monkeypatch.setenv("NOTION_TOKEN", "tok")
    monkeypatch.setattr(cli, "load_index", lambda client, db: Outcome.failed({}, "unauthorized"))

    assert cli.main(["check"]) == 1
    assert "unauthorized" in capsys.readouterr().out


def test_blocks_without_token_is_reported(capsys):
    assert cli.main(["blocks", "page-1"]) == 2
    assert "NOTION_TOKEN" in capsys.readouterr().err
