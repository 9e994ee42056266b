from __future__ import annotations

import json

from notion_blog.sources.base import PostRecord
from notion_blog.util.state import decode_snapshot, read_snapshot, write_snapshot


def sample_index():
    return {
        "hello-world": PostRecord(
            id="p1", title="Hello World", slug="hello-world", published=True,
            date="2024-01-02", authors=["Ada", "u2"], preview=[["Intro"]],
        ),
        "undated": PostRecord(id="p2", title="Undated", slug="undated"),
    }


def test_round_trip(tmp_path):
    path = tmp_path / "cache" / ".blog_index_data"
    index = sample_index()

    write_snapshot(path, index)
    outcome = read_snapshot(path)

    assert outcome.ok
    assert outcome.value == index
    assert list(outcome.value) == list(index)
    assert not (tmp_path / "cache" / ".blog_index_data.tmp").exists()


def test_snapshot_carries_legacy_fields(tmp_path):
    path = tmp_path / "snap"
    write_snapshot(path, sample_index())

    data = json.loads(path.read_text(encoding="utf-8"))

    rec = data["hello-world"]
    assert rec["Page"] == rec["title"] == "Hello World"
    assert rec["Slug"] == rec["slug"]
    assert rec["Published"] == "Yes"
    assert rec["Date"] == 1704153600000
    assert rec["Authors"] == rec["authors"]
    assert data["undated"]["Published"] == "No"
    assert data["undated"]["Date"] is None


def test_missing_file_is_a_miss(tmp_path):
    outcome = read_snapshot(tmp_path / "nope")

    assert not outcome.ok
    assert outcome.value == {}


def test_unparsable_file_is_a_miss(tmp_path):
    path = tmp_path / "snap"
    path.write_text("{not json", encoding="utf-8")

    assert not read_snapshot(path).ok


def test_wrong_shape_is_a_miss(tmp_path):
    path = tmp_path / "snap"
    path.write_text("[1, 2]", encoding="utf-8")
    assert not read_snapshot(path).ok

    path.write_text('{"x": {"title": "no id"}}', encoding="utf-8")
    assert not read_snapshot(path).ok


def test_decode_ignores_stale_legacy_values():
    index = decode_snapshot(json.dumps({
        "a": {"id": "1", "title": "A", "slug": "a", "published": True, "date": "", "authors": [],
              "Page": "Old title", "Published": "No"},
    }))

    assert index["a"].to_dict()["Page"] == "A"
    assert index["a"].to_dict()["Published"] == "Yes"


def test_undecodable_bytes_are_a_miss(tmp_path):
    path = tmp_path / "snap"
    path.write_bytes(b"\xff\xfe{garbage")

    outcome = read_snapshot(path)

    assert not outcome.ok
    assert outcome.value == {}


def test_wrongly_typed_fields_are_a_miss(tmp_path):
    path = tmp_path / "snap"
    base = {"id": "1", "title": "A", "slug": "a", "published": True}

    path.write_text(json.dumps({"a": {**base, "date": 20240101, "authors": []}}), encoding="utf-8")
    assert not read_snapshot(path).ok

    path.write_text(json.dumps({"a": {**base, "date": "2024-01-01", "authors": "abc"}}), encoding="utf-8")
    assert not read_snapshot(path).ok
