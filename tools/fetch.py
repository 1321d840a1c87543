"""
tools/fetch.py — Fetch a URL's raw body, and look up a page title.

TWO ENTRY POINTS:

  fetch_page(url)       → PageFetchResult, raises FetchError
    The first step of summarization. Returns the body as text — no
    extraction, no status check. A 404 page has a body too, and the
    sanitizer and the model can deal with it.

  fetch_page_title(url) → str, never raises
    Fetches with the shorter title timeout and runs extract_title().
    If the fetch itself fails, the URL fallback chain still applies
    (host, then the URL verbatim). A missing title should never stop
    someone from saving a link.

HTTP CONVENTIONS (shared with llm/client.py):
  - One httpx.AsyncClient per call, closed on exit — no pooling, no cache
  - Fixed User-Agent from settings.user_agent
  - Per-call timeout: 10s for titles, 15s for summary fetches
  - Redirects followed
  - No retries. A timeout fails exactly like a refused connection.

USAGE:
  from tools.fetch import fetch_page, fetch_page_title

  title = await fetch_page_title("https://example.com/article")
  page = await fetch_page("https://example.com/article")
  print(page.size)
"""

import logging

import httpx

from agent.errors import FetchError
from agent.state import PageFetchResult
from config import settings
from tools.extract import extract_title

logger = logging.getLogger(__name__)


# ── Raw fetch ──────────────────────────────────────────────────────────────────

async def fetch_page(url: str, *, timeout: float | None = None) -> PageFetchResult:
    """
    GET url and return its body decoded as text.

    Args:
        url:     Any http/https URL.
        timeout: Seconds. Defaults to settings.summary_timeout_seconds.

    Raises:
        FetchError: DNS, connection, TLS, timeout, or a URL httpx can't use.
    """
    if timeout is None:
        timeout = settings.summary_timeout_seconds

    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": settings.user_agent},
            follow_redirects=True,
        ) as client:
            response = await client.get(url)
            body = response.text
    except httpx.TimeoutException:
        raise FetchError(url, f"timeout after {timeout}s") from None
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(url, f"{type(e).__name__}: {e}") from e

    logger.debug("fetched %s: HTTP %s, %d chars", url, response.status_code, len(body))
    return PageFetchResult(url=url, body=body, status_code=response.status_code)


# ── Title lookup ───────────────────────────────────────────────────────────────

async def fetch_page_title(url: str) -> str:
    """
    Return a display title for url. Never raises.

    Uses the <title> element when the page has a usable one; otherwise
    the URL's host; otherwise the URL string unchanged.
    """
    try:
        page = await fetch_page(url, timeout=settings.title_timeout_seconds)
    except FetchError as e:
        logger.warning("title lookup fell back to URL: %s", e)
        return extract_title("", url)

    return extract_title(page.body, url)
