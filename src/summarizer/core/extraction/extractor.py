"""Content extractor for turning URLs into clean text.

This module implements ContentExtractor, which picks an extraction
strategy per URL (see :mod:`summarizer.core.extraction.classifier`) and
normalizes the result to an :class:`ExtractedContent`.

Strategies:
    - Shorteners are resolved through their redirects (HEAD, then GET);
      an unresolvable shortener keeps its original URL.
    - GitHub blob URLs are rewritten to raw.githubusercontent.com and
      fetched as plain text.
    - Twitter/X pages are rendered through Jina Reader. With
      ``follow_links`` the first external article linked from the tweet
      is extracted too (one level only) and appended.
    - Everything else is fetched as HTML and reduced to its main content.

Error Handling:
    - Transport failures: NetworkError
    - Non-2xx responses: FetchError
    - Linked-article failures: swallowed, tweet-only content is returned

Example usage:
    extractor = ContentExtractor()
    content = await extractor.extract_from_url("https://example.com/article")
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from summarizer.core.errors.http import FetchError, NetworkError

from .classifier import UrlKind, classify, find_linked_url, rewrite_github_blob
from .html_text import clean_markdown, count_words, html_to_markdown
from .models import ExtractedContent

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; Summarizer/1.0; +https://openrouter.ai)"
JINA_READER_URL = "https://r.jina.ai/"

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE = "en-US,en;q=0.5"

# Containers tried in order; the first with substantial text wins
CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    "main",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
    "#content",
    ".post",
    ".article",
)

# Page chrome removed from <body> when no content container qualifies
CHROME_SELECTORS = (
    "nav",
    "header",
    "footer",
    "aside",
    ".sidebar",
    ".navigation",
    ".menu",
    ".comments",
    ".related",
    ".share",
    ".social",
    "#sidebar",
    "#navigation",
    "#menu",
    "#comments",
)

MIN_CONTAINER_WORDS = 100

_HEADING = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
_FIRST_LINE = re.compile(r"^[ \t]*(\S.*)$", re.MULTILINE)


class ContentExtractor:
    """Extracts readable content from URLs.

    Instances hold no per-request state and can be shared between
    concurrent callers.

    Attributes:
        user_agent: User-Agent sent with page fetches
        jina_reader_url: Base URL of the Jina Reader proxy
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        jina_reader_url: str = JINA_READER_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the extractor.

        Args:
            user_agent: Browser-like User-Agent for HTML and raw fetches.
            jina_reader_url: Jina Reader base URL; the target URL is appended.
            timeout: Request timeout in seconds for internally created clients.
            client: Optional shared httpx client. When omitted a short-lived
                client is created per request.
        """
        self.user_agent = user_agent
        self.jina_reader_url = jina_reader_url.rstrip("/") + "/"
        self.timeout = timeout
        self._client = client

    async def extract_from_url(self, url: str, follow_links: bool = True) -> ExtractedContent:
        """Extract normalized content from ``url``.

        Args:
            url: Validated http(s) URL.
            follow_links: For tweets, also extract the first linked article.
                The nested extraction never follows links itself.

        Returns:
            ExtractedContent for the page.

        Raises:
            InvalidUrlError: If the URL is malformed.
            NetworkError: On transport failures.
            FetchError: On non-2xx responses.
        """
        kind = classify(url)
        resolved_url = url
        if kind is UrlKind.SHORTENER:
            resolved_url = await self._resolve_short_url(url)
            logger.info("Resolved %s -> %s", url, resolved_url)

        processed_url = rewrite_github_blob(resolved_url)
        kind = classify(processed_url)
        logger.debug("Extracting %s via %s strategy", processed_url, kind.value)

        if kind is UrlKind.RAW_TEXT:
            return await self._extract_raw_text(processed_url)

        if kind is UrlKind.JS_HEAVY:
            tweet = await self._extract_via_jina(url)
            if follow_links:
                return await self._append_linked_content(tweet)
            return tweet

        return await self._extract_html(processed_url, url)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, url: str, headers: Optional[dict[str, str]] = None) -> httpx.Response:
        """Send one request following redirects, wrapping transport failures."""
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=headers, follow_redirects=True)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, url, headers=headers, follow_redirects=True)
        except httpx.TransportError as e:
            raise NetworkError(url, str(e) or type(e).__name__, original_error=e) from e

    async def _fetch_text(self, url: str, headers: dict[str, str]) -> str:
        response = await self._request("GET", url, headers=headers)
        if not response.is_success:
            raise FetchError(url, response.status_code, response.reason_phrase)
        return response.text

    async def _resolve_short_url(self, url: str) -> str:
        """Follow a shortener's redirects; fall back to ``url`` on failure."""
        for method in ("HEAD", "GET"):
            try:
                response = await self._request(method, url)
            except NetworkError as e:
                logger.debug("%s failed while resolving %s: %s", method, url, e.message)
                continue
            return str(response.url)
        logger.warning("Could not resolve short URL %s, using it as-is", url)
        return url

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    async def _extract_raw_text(self, url: str) -> ExtractedContent:
        body = await self._fetch_text(url, {"User-Agent": self.user_agent})

        match = _HEADING.search(body)
        if match:
            title = match.group(1).strip()
        else:
            title = urlparse(url).path.rstrip("/").split("/")[-1]

        return ExtractedContent(
            title=title,
            content=body.strip(),
            url=url,
            word_count=count_words(body),
        )

    async def _extract_via_jina(self, url: str) -> ExtractedContent:
        markdown = await self._fetch_text(f"{self.jina_reader_url}{url}", {"Accept": "text/markdown"})

        match = _HEADING.search(markdown) or _FIRST_LINE.search(markdown)
        title = match.group(1).strip() if match else ""

        return ExtractedContent.from_text(
            title=title or "Tweet",
            content=clean_markdown(markdown),
            url=url,
        )

    async def _append_linked_content(self, tweet: ExtractedContent) -> ExtractedContent:
        linked_url = find_linked_url(tweet.content)
        if not linked_url:
            return tweet

        logger.info("Found linked URL in tweet: %s", linked_url)
        try:
            linked = await self.extract_from_url(linked_url, follow_links=False)
        except Exception as e:
            logger.warning("Failed to fetch linked URL %s: %s", linked_url, e)
            return tweet

        logger.info("Extracted %d words from linked content", linked.word_count)
        return tweet.with_linked(linked)

    async def _extract_html(self, fetch_url: str, url: str) -> ExtractedContent:
        html = await self._fetch_text(
            fetch_url,
            {
                "User-Agent": self.user_agent,
                "Accept": HTML_ACCEPT,
                "Accept-Language": ACCEPT_LANGUAGE,
            },
        )

        soup = BeautifulSoup(html, "lxml")
        title = extract_title(soup)
        main_html = extract_main_html(soup)

        return ExtractedContent.from_text(
            title=title,
            content=clean_markdown(html_to_markdown(main_html)),
            url=url,
        )


def extract_title(soup: BeautifulSoup) -> str:
    """Return og:title, else <title>, else the first <h1>, else "Untitled"."""
    og_title = soup.select_one('meta[property="og:title"]')
    if og_title is not None:
        content = (og_title.get("content") or "").strip()
        if content:
            return content

    for selector in ("title", "h1"):
        element = soup.select_one(selector)
        if element is not None:
            text = element.get_text(" ", strip=True)
            if text:
                return text

    return "Untitled"


def _has_substantial_content(element: Tag) -> bool:
    return count_words(element.get_text(" ")) > MIN_CONTAINER_WORDS


def extract_main_html(soup: BeautifulSoup) -> str:
    """Return the inner HTML of the page's main content.

    The first element matching :data:`CONTENT_SELECTORS` with more than
    :data:`MIN_CONTAINER_WORDS` words wins. Otherwise the body is used
    with :data:`CHROME_SELECTORS` removed. The soup is modified in place
    in the fallback case.
    """
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is not None and _has_substantial_content(element):
            return element.decode_contents()

    body = soup.body
    if body is None:
        return ""

    for selector in CHROME_SELECTORS:
        for element in body.select(selector):
            if not element.decomposed:
                element.decompose()

    return body.decode_contents()
