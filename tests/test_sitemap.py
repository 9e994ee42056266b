from __future__ import annotations

from datetime import datetime, timezone

from notion_blog.report.sitemap import blog_link, render_sitemap, write_sitemap
from notion_blog.sources.base import PostRecord

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def index():
    return {
        "dated": PostRecord(id="1", title="Dated", slug="dated", published=True, date="2024-01-02"),
        "undated": PostRecord(id="2", title="Undated", slug="undated", published=True),
        "draft": PostRecord(id="3", title="Draft", slug="draft", published=False, date="2024-01-01"),
    }


def test_blog_link():
    assert blog_link("hello-world") == "/blog/hello-world"


def test_static_and_post_urls():
    xml = render_sitemap(index(), "https://example.com/", now=NOW)

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<loc>https://example.com</loc>" in xml
    assert "<loc>https://example.com/blog</loc>" in xml
    assert "<loc>https://example.com/contact</loc>" in xml
    assert "<loc>https://example.com/blog/dated</loc>" in xml
    assert "<lastmod>2024-01-02T00:00:00.000Z</lastmod>" in xml
    assert "<lastmod>2025-06-01T12:00:00.000Z</lastmod>" in xml
    assert "/blog/draft" not in xml
    assert xml.count("<url>") == 5
    assert xml.rstrip().endswith("</urlset>")


def test_post_order_follows_index():
    xml = render_sitemap(index(), "https://example.com", now=NOW)

    assert xml.index("/blog/dated") < xml.index("/blog/undated")


def test_write_sitemap(tmp_path):
    out = write_sitemap(index(), "https://example.com", tmp_path / "public" / "sitemap.xml")

    assert out.read_text(encoding="utf-8").count("<url>") == 5
