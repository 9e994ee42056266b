from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional

from notion_blog.agent.client import NotionClient, make_client
from notion_blog.config import Settings
from notion_blog.sources.authors import AuthorResolver
from notion_blog.sources.base import MODE_NORMAL, MODE_PREVIEWS, MODES, Index, Outcome
from notion_blog.sources.notion import load_index
from notion_blog.util.state import read_snapshot, write_snapshot

logger = logging.getLogger(__name__)

PREVIEW_PREFIX = 10


def clear_previews(index: Index, limit: int = PREVIEW_PREFIX) -> Index:
    """Copy of ``index`` with ``preview`` cleared on its first ``limit`` records."""
    out: Index = {}
    for i, (slug, rec) in enumerate(index.items()):
        out[slug] = dataclasses.replace(rec, preview=None) if i < limit else rec
    return out


class IndexCache:
    """Get-or-populate slot per mode in front of the Notion index fetch.

    Snapshots are written in the background; concurrent populates of the same
    slot are not serialized and the last write wins.
    """

    def __init__(self, fetch: Callable[[], Outcome[Index]], *, cache_file: Path, enabled: bool = False):
        self.fetch = fetch
        self.cache_file = Path(cache_file)
        self.enabled = enabled
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []

    def slot_path(self, mode: str) -> Path:
        if mode not in MODES:
            raise ValueError(f"unknown index mode: {mode!r}")
        if mode == MODE_PREVIEWS:
            return self.cache_file.with_name(self.cache_file.name + "_previews")
        return self.cache_file

    def get_index(self, mode: str = MODE_NORMAL) -> Index:
        slot = self.slot_path(mode)
        if self.enabled:
            cached = read_snapshot(slot)
            if cached.ok:
                logger.debug("index cache hit: %s", slot)
                return cached.value
            logger.debug("index cache miss for %s: %s", slot, cached.error)

        fetched = self.fetch()
        index = fetched.value
        if mode == MODE_PREVIEWS:
            index = clear_previews(index)

        # a failed fetch degrades to an empty index; keep it out of the slot
        if self.enabled and fetched.ok:
            self._persist(slot, index)
        return index

    def _persist(self, slot: Path, index: Index):
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="index-cache")
        fut = self._executor.submit(write_snapshot, slot, index)
        fut.add_done_callback(_log_write_failure)
        self._pending = [f for f in self._pending if not f.done()] + [fut]

    def flush(self):
        """Block until pending snapshot writes finish. Failures stay swallowed."""
        pending, self._pending = self._pending, []
        for fut in pending:
            fut.exception()

    def close(self):
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def _log_write_failure(fut: Future):
    exc = fut.exception()
    if exc is not None:
        logger.debug("index cache write failed: %s", exc)


def build_index_cache(
    settings: Settings,
    client: Optional[NotionClient] = None,
    resolver: Optional[AuthorResolver] = None,
) -> IndexCache:
    client = client or make_client(settings)
    database_id = settings.blog_index_id or ""

    def fetch() -> Outcome[Index]:
        return load_index(client, database_id, resolver=resolver)

    return IndexCache(fetch, cache_file=settings.cache_file, enabled=settings.use_cache)
