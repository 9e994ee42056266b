from __future__ import annotations

import logging
from typing import Dict, List, Optional

from notion_blog.agent.client import NotionClient
from notion_blog.util.slug import slugify
from .authors import AuthorProfile, AuthorResolver, IdentityAuthorResolver
from .base import Index, Outcome, PostRecord

logger = logging.getLogger(__name__)

TITLE_PROPERTY = "Page"
PUBLISHED_PROPERTY = "Published"
DATE_PROPERTY = "Date"
AUTHORS_PROPERTY = "Authors"

PUBLISHED_FILTER = {"property": PUBLISHED_PROPERTY, "checkbox": {"equals": True}}
DATE_DESC = [{"property": DATE_PROPERTY, "direction": "descending"}]


def extract_title(properties: dict) -> str:
    prop = properties.get(TITLE_PROPERTY) or {}
    if prop.get("type") != "title":
        return ""
    return "".join(t.get("plain_text") or "" for t in prop.get("title") or [])


def _people(properties: dict) -> List[dict]:
    prop = properties.get(AUTHORS_PROPERTY) or {}
    return [p for p in prop.get("people") or [] if isinstance(p, dict)]


def record_from_page(page: dict, profiles: Dict[str, AuthorProfile]) -> Optional[PostRecord]:
    """Map one database row to a PostRecord, or None when it has no usable title."""
    properties = page.get("properties")
    if not isinstance(properties, dict):
        return None
    title = extract_title(properties)
    slug = slugify(title)
    if not title or not slug:
        return None

    published = bool((properties.get(PUBLISHED_PROPERTY) or {}).get("checkbox") or False)
    date = ((properties.get(DATE_PROPERTY) or {}).get("date") or {}).get("start") or ""

    authors = []
    for person in _people(properties):
        pid = person.get("id") or ""
        profile = profiles.get(pid)
        authors.append(person.get("name") or (profile.display_name if profile else "") or pid)

    return PostRecord(id=page["id"], title=title, slug=slug, published=published, date=date, authors=authors)


def _query_published(client: NotionClient, database_id: str) -> List[dict]:
    pages: List[dict] = []
    cursor = None
    seen = set()
    while True:
        resp = client.query_database(database_id, filter=PUBLISHED_FILTER, sorts=DATE_DESC, start_cursor=cursor)
        pages.extend(resp.get("results") or [])
        cursor = resp.get("next_cursor")
        if not resp.get("has_more") or not cursor:
            return pages
        if cursor in seen:
            logger.warning("Notion returned cursor %s twice for %s; stopping", cursor, database_id)
            return pages
        seen.add(cursor)


def load_index(
    client: NotionClient,
    database_id: str,
    *,
    resolver: Optional[AuthorResolver] = None,
) -> Outcome[Index]:
    resolver = resolver or IdentityAuthorResolver()
    try:
        pages = _query_published(client, database_id)
        ids = []
        for page in pages:
            for person in _people(page.get("properties") or {}):
                if person.get("id") and not person.get("name") and person["id"] not in ids:
                    ids.append(person["id"])
        profiles = resolver.resolve_authors(ids) if ids else {}

        index: Index = {}
        for page in pages:
            record = record_from_page(page, profiles)
            if record is None:
                continue
            if record.slug in index:
                # later rows win; the API order is date-descending
                logger.debug("slug %r from %s replaces %s", record.slug, record.id, index[record.slug].id)
            index[record.slug] = record
    except Exception as exc:  # noqa: BLE001 - callers always get an index, possibly empty
        logger.exception("Failed to load Notion posts from %s", database_id)
        return Outcome.failed({}, exc)
    logger.info("Loaded %d posts from Notion database %s", len(index), database_id)
    return Outcome(index)


def fetch_index(
    client: NotionClient,
    database_id: str,
    *,
    resolver: Optional[AuthorResolver] = None,
) -> Index:
    return load_index(client, database_id, resolver=resolver).value
