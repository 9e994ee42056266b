"""Settings for the blog index pipeline.

Values come from an optional YAML file and the environment (``.env`` is
loaded first); environment variables win over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import load_dotenv

from notion_blog.util.paths import resolve_storage_dir

DEFAULT_CACHE_NAME = ".blog_index_data"
DEFAULT_SITE_URL = "https://yourdomain.com"


@dataclass(frozen=True)
class Settings:
    notion_token: Optional[str]
    blog_index_id: Optional[str]
    use_cache: bool
    cache_file: Path
    site_url: str
    storage_dir: Path
    timeout: int = 30
    max_retries: int = 3


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip() == "true"


def load_settings(config_path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    if env is None:
        load_dotenv(Path.cwd() / ".env")
        env = os.environ

    cfg = {}
    base = None
    if config_path is not None and config_path.exists():
        cfg = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        base = config_path.resolve().parent

    storage_dir = resolve_storage_dir(cfg.get("storage_dir", "./data"), base=base)

    cache_raw = env.get("BLOG_INDEX_CACHE") or cfg.get("cache_file")
    if cache_raw:
        cache_file = Path(os.path.expanduser(cache_raw))
        if not cache_file.is_absolute():
            cache_file = storage_dir / cache_file
    else:
        cache_file = storage_dir / DEFAULT_CACHE_NAME

    use_cache = env.get("USE_CACHE")
    return Settings(
        notion_token=env.get("NOTION_TOKEN") or cfg.get("notion_token"),
        blog_index_id=env.get("BLOG_INDEX_ID") or cfg.get("blog_index_id"),
        use_cache=_as_bool(use_cache if use_cache is not None else cfg.get("use_cache", False)),
        cache_file=cache_file,
        site_url=(env.get("SITE_URL") or cfg.get("site_url") or DEFAULT_SITE_URL).rstrip("/"),
        storage_dir=storage_dir,
        timeout=int(cfg.get("timeout", 30)),
        max_retries=int(cfg.get("max_retries", 3)),
    )
