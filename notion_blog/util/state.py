import json
from pathlib import Path

from notion_blog.sources.base import Index, Outcome, PostRecord
from .paths import ensure_dir


class SnapshotError(Exception):
    """Cached index snapshot is missing or cannot be decoded."""


def decode_snapshot(text: str) -> Index:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SnapshotError(f"expected an object, got {type(data).__name__}")
    index: Index = {}
    for slug, raw in data.items():
        if not isinstance(raw, dict):
            raise SnapshotError(f"entry {slug!r} is not an object")
        try:
            index[slug] = PostRecord.from_dict(raw)
        except (KeyError, TypeError) as exc:
            raise SnapshotError(f"entry {slug!r} is malformed: {exc}") from exc
    return index


def encode_snapshot(index: Index) -> str:
    return json.dumps({slug: rec.to_dict() for slug, rec in index.items()}, ensure_ascii=False)


def read_snapshot(path: Path) -> Outcome[Index]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return Outcome.failed({}, exc)
    try:
        return Outcome(decode_snapshot(text))
    except SnapshotError as exc:
        return Outcome.failed({}, exc)


def write_snapshot(path: Path, index: Index):
    ensure_dir(path.parent)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(encode_snapshot(index), encoding="utf-8")
    tmp.replace(path)
