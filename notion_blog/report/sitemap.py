from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote
from jinja2 import Environment, FileSystemLoader, select_autoescape

from notion_blog.sources.base import Index, PostRecord, date_to_millis
from notion_blog.util.paths import ensure_dir

STATIC_PAGES = (
    {"path": "", "changefreq": "daily", "priority": "1.0"},
    {"path": "/blog", "changefreq": "daily", "priority": "0.9"},
    {"path": "/contact", "changefreq": "monthly", "priority": "0.5"},
)

_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
    autoescape=select_autoescape(["xml", "j2"]),
)

def blog_link(slug: str) -> str:
    return f"/blog/{quote(slug)}"

def post_is_published(post: PostRecord) -> bool:
    return post.published

def _iso_millis(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

def render_sitemap(index: Index, site_url: str, *, now: Optional[datetime] = None) -> str:
    """Render sitemap.xml for the site's static pages plus every published post.

    Posts without a date get ``now`` (default: current UTC time) as lastmod.
    """
    now = now or datetime.now(timezone.utc)
    posts = []
    for post in index.values():
        if not post_is_published(post):
            continue
        millis = date_to_millis(post.date)
        when = datetime.fromtimestamp(millis / 1000, tz=timezone.utc) if millis is not None else now
        posts.append({"link": blog_link(post.slug), "lastmod": _iso_millis(when)})

    tpl = _env.get_template("sitemap.xml.j2")
    return tpl.render(site_url=site_url.rstrip("/"), static_pages=STATIC_PAGES, posts=posts) + "\n"

def write_sitemap(index: Index, site_url: str, out_path: Path) -> Path:
    ensure_dir(out_path.parent)
    out_path.write_text(render_sitemap(index, site_url), encoding="utf-8")
    return out_path
