import re

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")

def slugify(title: str) -> str:
    """Turn a post title into its URL slug: ``"Hello, World! 2024"`` -> ``"hello-world-2024"``."""
    s = (title or "").lower().strip()
    s = _NON_SLUG_RE.sub("-", s)
    return s.strip("-")
