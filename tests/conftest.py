from __future__ import annotations

from unittest.mock import Mock

import pytest

from notion_blog.agent.client import NotionClient


def make_page(page_id, title, *, published=True, date="2024-01-01", people=None, title_type="title"):
    runs = [{"plain_text": part} for part in ([title] if isinstance(title, str) else title)]
    return {
        "object": "page",
        "id": page_id,
        "properties": {
            "Page": {"type": title_type, title_type: runs},
            "Published": {"type": "checkbox", "checkbox": published},
            "Date": {"type": "date", "date": {"start": date} if date else None},
            "Authors": {"type": "people", "people": people or []},
        },
    }


def query_response(pages, *, has_more=False, next_cursor=None):
    return {"object": "list", "results": pages, "has_more": has_more, "next_cursor": next_cursor}


@pytest.fixture
def client():
    return Mock(spec=NotionClient)


@pytest.fixture
def page():
    return make_page


@pytest.fixture
def listing():
    return query_response
