"""Web clipper — fetches a page and captures it as ClipData via httpx."""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup

from sheaf.config import settings
from sheaf.errors import SourceUnavailable
from sheaf.models.source import ClipData

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; Sheaf/0.1; +https://example.invalid/sheaf)"

# Elements whose text is never part of the readable page
NON_CONTENT_TAGS = ["script", "style", "noscript", "nav", "header", "footer", "aside", "form"]


class WebClipper:
    """Captures the readable text and provenance of a web page."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout or settings.request_timeout
        self._transport = transport

    async def clip(self, url: str) -> ClipData:
        """Fetch ``url`` and return its clip; raises SourceUnavailable on failure."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers={"User-Agent": USER_AGENT})
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Could not clip %s: %s", url, exc)
            raise SourceUnavailable(url, str(exc)) from exc

        return parse_page(response.text, str(response.url))


def parse_page(html: str, url: str) -> ClipData:
    """Extract title, meta provenance and visible text from an HTML page."""
    soup = BeautifulSoup(html, "html.parser")

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        og_title = soup.find("meta", property="og:title")
        if og_title and og_title.get("content"):
            title = og_title["content"].strip()

    site_name = _meta_content(soup, "og:site_name")
    author = _meta_content(soup, "author")
    date = None
    for prop in ("article:published_time", "datePublished", "pubdate"):
        date = _meta_content(soup, prop)
        if date:
            break

    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    body = soup.body or soup
    lines = [line.strip() for line in body.get_text(separator="\n").splitlines()]
    content = "\n".join(line for line in lines if line)

    logger.info("Clipped %s (%d chars)", url, len(content))
    return ClipData(
        content=content,
        url=url,
        title=title or None,
        site_name=site_name,
        author=author,
        date=date,
    )


def _meta_content(soup: BeautifulSoup, key: str) -> str | None:
    meta = soup.find("meta", property=key) or soup.find("meta", attrs={"name": key})
    if meta and meta.get("content"):
        return meta["content"].strip() or None
    return None
