# backend/assessment_runner/services/crawler.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..core.config import get_settings
from ..schemas.crawl import CrawlResponse

logger = logging.getLogger(__name__)

CRAWL_NO_CONTENT = "Crawl failed: no structured page content returned."
CRAWL_EXCEPTION = "Crawl failed: exception thrown."


class MalformedCrawlResponse(ValueError):
    """Crawl service answered, but not with a recognisable page list."""


def _extract_pages(data: Any) -> Any:
    """
    The crawl service has shipped two response shapes:

        {"pages": [...]}            # top-level
        [{"pages": [...]}, ...]     # nested under the first element
    """
    if isinstance(data, dict) and "pages" in data:
        return data["pages"]
    if isinstance(data, list) and data and isinstance(data[0], dict) and "pages" in data[0]:
        return data[0]["pages"]
    raise MalformedCrawlResponse("response has no 'pages' array")


def flatten_pages(data: Any) -> str:
    """
    Render a crawl response as Markdown-ish text blocks:

        ## {title} ({url})
        {text}

    Pages are separated by a blank line. Raises MalformedCrawlResponse when
    the payload is not one of the known shapes.
    """
    pages = _extract_pages(data)
    if not isinstance(pages, list):
        raise MalformedCrawlResponse("'pages' is not an array")
    try:
        parsed = CrawlResponse(pages=pages)
    except ValidationError as e:
        raise MalformedCrawlResponse(f"invalid page entries: {e.error_count()} errors") from e
    return "\n\n".join(p.as_markdown() for p in parsed.pages)


class CrawlClient:
    """
    Thin client for the Crawl4AI HTTP endpoint.

    `crawl()` never raises: failures are turned into the sentinel strings above
    so a dead crawler degrades the prompt instead of killing the cycle.
    """

    name = "crawl4ai"

    def __init__(
        self,
        endpoint: str,
        max_pages: int = 20,
        depth: int = 2,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint = endpoint
        self.max_pages = max_pages
        self.depth = depth
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "CrawlClient":
        settings = get_settings()
        return cls(
            endpoint=settings.CRAWL4AI_ENDPOINT,
            max_pages=settings.CRAWL_MAX_PAGES,
            depth=settings.CRAWL_DEPTH,
            timeout=settings.CRAWL_TIMEOUT_SECONDS,
        )

    def _build_payload(self, url: str) -> Dict[str, Any]:
        urls: List[str] = [url]
        return {
            "urls": urls,
            "maxPages": self.max_pages,
            "depth": self.depth,
            "crawlJs": True,
            "htmlOnly": False,
        }

    async def crawl(self, url: str) -> str:
        payload = self._build_payload(url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.endpoint, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Crawl request failed for %s: %s",
                url,
                e,
                extra={"url": url, "step": "crawl"},
            )
            return CRAWL_EXCEPTION

        try:
            text = flatten_pages(data)
        except MalformedCrawlResponse as e:
            logger.error(
                "Unexpected crawl response format for %s: %s",
                url,
                e,
                extra={"url": url, "step": "crawl"},
            )
            return CRAWL_NO_CONTENT

        logger.info(
            "Crawled %s",
            url,
            extra={"url": url, "step": "crawl"},
        )
        return text
