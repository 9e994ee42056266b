#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path

from notion_blog.agent.client import make_client
from notion_blog.aggregator.cache import build_index_cache
from notion_blog.config import load_settings
from notion_blog.report.sitemap import write_sitemap
from notion_blog.sources.base import MODE_NORMAL, MODE_PREVIEWS
from notion_blog.sources.blocks import get_blocks
from notion_blog.sources.notion import load_index


def cmd_index(args, settings) -> int:
    cache = build_index_cache(settings)
    try:
        index = cache.get_index(MODE_PREVIEWS if args.previews else MODE_NORMAL)
    finally:
        cache.close()
    if args.json:
        print(json.dumps({slug: rec.to_dict() for slug, rec in index.items()}, indent=2, ensure_ascii=False))
    else:
        for slug, rec in index.items():
            print(f"{rec.date or '----------':10}  {slug}  ({rec.title})")
        print(f"[notion_blog] {len(index)} posts")
    return 0


def cmd_blocks(args, settings) -> int:
    nodes = get_blocks(make_client(settings), args.page_id)
    print(json.dumps([n.as_block() for n in nodes], indent=2, ensure_ascii=False))
    return 0


def cmd_sitemap(args, settings) -> int:
    cache = build_index_cache(settings)
    try:
        index = cache.get_index(MODE_NORMAL)
    finally:
        cache.close()
    out = Path(args.out) if args.out else settings.storage_dir / "sitemap.xml"
    write_sitemap(index, settings.site_url, out)
    print(f"[notion_blog] Wrote: {out}")
    return 0


def cmd_check(args, settings) -> int:
    print("Environment check:")
    print(f"  NOTION_TOKEN set: {bool(settings.notion_token)}")
    print(f"  BLOG_INDEX_ID: {settings.blog_index_id}")
    print(f"  cache: {'on' if settings.use_cache else 'off'} ({settings.cache_file})")
    if not settings.notion_token:
        return 1

    outcome = load_index(make_client(settings), settings.blog_index_id or "")
    if not outcome.ok:
        print(f"[notion_blog] Notion query failed: {outcome.error}")
        return 1
    titles = [rec.title for rec in outcome.value.values()][:5]
    print(f"[notion_blog] Found {len(outcome.value)} posts")
    for t in titles:
        print(f"  - {t}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="notion-blog", description="Notion blog index and content tools")
    ap.add_argument("--config", default="config.yml")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("index", help="print the published post index")
    p.add_argument("--previews", action="store_true", help="use the preview-stripped index slot")
    p.add_argument("--json", action="store_true", help="dump the full index as JSON")
    p.set_defaults(func=cmd_index)

    p = sub.add_parser("blocks", help="print the render tree of one page")
    p.add_argument("page_id")
    p.set_defaults(func=cmd_blocks)

    p = sub.add_parser("sitemap", help="write sitemap.xml")
    p.add_argument("--out", default=None, help="output path (default: <storage_dir>/sitemap.xml)")
    p.set_defaults(func=cmd_sitemap)

    p = sub.add_parser("check", help="check configuration and Notion connectivity")
    p.set_defaults(func=cmd_check)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings(Path(args.config))
    try:
        return args.func(args, settings)
    except RuntimeError as e:
        print(f"[notion_blog] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
