from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from notion_blog.config import Settings

logger = logging.getLogger(__name__)

API_BASE = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
RETRY_STATUSES = {429, 500, 502, 503, 504}


class NotionAPIError(Exception):
    """Query, auth or network failure talking to the Notion API."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NotionClient:
    """Minimal Notion REST client: database queries and block children listing."""

    DEFAULT_INITIAL_BACKOFF = 1.0  # seconds
    DEFAULT_MAX_BACKOFF = 30.0
    DEFAULT_BACKOFF_MULTIPLIER = 2.0

    def __init__(
        self,
        token: str,
        *,
        timeout: int = 30,
        max_retries: int = 3,
        initial_backoff: float | None = None,
        max_backoff: float | None = None,
        session: requests.Session | None = None,
        sleep=time.sleep,
    ):
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff if initial_backoff is not None else self.DEFAULT_INITIAL_BACKOFF
        self.max_backoff = max_backoff if max_backoff is not None else self.DEFAULT_MAX_BACKOFF
        self.session = session or requests.Session()
        self._sleep = sleep

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }

    def query_database(
        self,
        database_id: str,
        *,
        filter: Optional[dict] = None,
        sorts: Optional[list] = None,
        start_cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if start_cursor:
            body["start_cursor"] = start_cursor
        return self._request("POST", f"{API_BASE}/databases/{database_id}/query", json=body)

    def list_block_children(self, block_id: str, *, page_size: int = 100) -> Dict[str, Any]:
        return self._request(
            "GET", f"{API_BASE}/blocks/{block_id}/children", params={"page_size": page_size}
        )

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Send one API call, retrying rate limits, 5xx and connection errors with backoff.

        Raises
        ------
        NotionAPIError
            On any other HTTP error, on an undecodable body, or once retries are exhausted.
        """
        backoff = self.initial_backoff
        for attempt in range(self.max_retries + 1):
            try:
                r = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as exc:
                if attempt >= self.max_retries:
                    raise NotionAPIError(f"{method} {url} failed after {attempt + 1} attempts: {exc}") from exc
                wait = backoff
            else:
                if r.status_code < 400:
                    try:
                        return r.json()
                    except ValueError as exc:
                        raise NotionAPIError(f"invalid JSON from {url}: {exc}", r.status_code) from exc
                if r.status_code not in RETRY_STATUSES or attempt >= self.max_retries:
                    raise NotionAPIError(_error_message(r), r.status_code)
                wait = _retry_after(r) or backoff

            wait = min(wait, self.max_backoff)
            logger.warning(
                "Notion request %s %s failed (attempt %d/%d); retrying in %.1fs",
                method, url, attempt + 1, self.max_retries + 1, wait,
            )
            self._sleep(wait)
            backoff = min(backoff * self.DEFAULT_BACKOFF_MULTIPLIER, self.max_backoff)
        raise NotionAPIError(f"{method} {url}: retries exhausted")  # pragma: no cover


def _retry_after(r: requests.Response) -> Optional[float]:
    value = r.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _error_message(r: requests.Response) -> str:
    try:
        data = r.json()
        detail = data.get("message") or data.get("code") or ""
    except (ValueError, AttributeError):
        detail = r.text[:200]
    return f"Notion API returned {r.status_code}: {detail}".rstrip(": ")


def make_client(settings: Settings) -> NotionClient:
    if not settings.notion_token:
        raise RuntimeError("NOTION_TOKEN not set (.env or env var).")
    return NotionClient(settings.notion_token, timeout=settings.timeout, max_retries=settings.max_retries)
