"""Convert Notion child blocks into the render tree the page renderer consumes.

Each recognised raw block type has one decode rule in ``DECODERS``. Anything
else (or a recognised type whose payload is missing) keeps its raw type tag
with empty properties, so the renderer can skip it.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from notion_blog.agent.client import NotionClient
from .base import Outcome, RenderNode

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

# payload -> (properties, format)
Decoder = Callable[[dict], Tuple[dict, Optional[dict]]]


def _runs(payload: dict) -> List[list]:
    return [[t.get("plain_text") or ""] for t in payload.get("rich_text") or []]


def _text_rule(payload: dict):
    return {"title": _runs(payload)}, None


def _code_rule(payload: dict):
    code = "".join(t.get("plain_text") or "" for t in payload.get("rich_text") or [])
    return {"title": [[code]], "language": [[payload.get("language") or "plain text"]]}, None


def _divider_rule(payload: dict):
    return {}, None


def _image_rule(payload: dict):
    if payload.get("type") == "external":
        src = (payload.get("external") or {}).get("url")
    else:
        src = (payload.get("file") or {}).get("url")
    return {}, {"display_source": src}


# raw type -> (normalized type, decoder)
DECODERS: Dict[str, Tuple[str, Decoder]] = {
    "paragraph": ("text", _text_rule),
    "heading_1": ("header", _text_rule),
    "heading_2": ("sub_header", _text_rule),
    "heading_3": ("sub_sub_header", _text_rule),
    "bulleted_list_item": ("bulleted_list", _text_rule),
    "numbered_list_item": ("numbered_list", _text_rule),
    "code": ("code", _code_rule),
    "quote": ("quote", _text_rule),
    "divider": ("divider", _divider_rule),
    "image": ("image", _image_rule),
}


def normalize_block(raw: dict) -> RenderNode:
    raw_type = raw.get("type") or ""
    node = RenderNode(id=raw.get("id") or "", type=raw_type)
    rule = DECODERS.get(raw_type)
    if rule is None:
        return node

    node_type, decode = rule
    payload = raw.get(raw_type)
    # divider has nothing to decode; everything else needs its payload
    if not payload and raw_type != "divider":
        return node
    try:
        properties, fmt = decode(payload or {})
    except (AttributeError, TypeError):
        logger.debug("block %s of type %s has an unexpected payload", node.id, raw_type)
        return node
    node.type = node_type
    node.properties = properties
    node.format = fmt
    return node


def load_blocks(client: NotionClient, record_id: str) -> Outcome[List[RenderNode]]:
    """Fetch and normalize the first page of a post's child blocks.

    Only one page (``PAGE_SIZE`` blocks) is read; longer posts are truncated.
    """
    try:
        resp = client.list_block_children(record_id, page_size=PAGE_SIZE)
        results = resp.get("results") or []
        if resp.get("has_more"):
            logger.info("Page %s has more than %d blocks; only the first page is rendered", record_id, PAGE_SIZE)
        nodes = [normalize_block(b) for b in results if isinstance(b, dict)]
    except Exception as exc:  # noqa: BLE001 - renderer gets an empty page instead of an error
        logger.exception("Error fetching page content for %s", record_id)
        return Outcome.failed([], exc)
    logger.debug("Got %d blocks for page %s", len(nodes), record_id)
    return Outcome(nodes)


def get_blocks(client: NotionClient, record_id: str) -> List[RenderNode]:
    return load_blocks(client, record_id).value
