"""URL classification for content extraction.

Decides which extraction strategy applies to a URL. Everything here is
pure string/URL logic with no I/O, so the extractor can be tested by
driving it with URLs alone.

Strategies (first match wins in the extractor):
    SHORTENER:   t.co, bit.ly, ... resolved via redirects first
    GITHUB_BLOB: github.com/<o>/<r>/blob/... rewritten to a raw URL
    RAW_TEXT:    raw.githubusercontent.com, fetched as plain text
    JS_HEAVY:    twitter.com / x.com, rendered through Jina Reader
    GENERIC:     everything else, fetched as HTML
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional
from urllib.parse import urlparse, urlunparse

from summarizer.core.errors.extraction import InvalidUrlError

SHORTENER_HOSTS = frozenset(["t.co", "bit.ly", "tinyurl.com", "goo.gl", "ow.ly", "is.gd"])
GITHUB_HOST = "github.com"
RAW_GITHUB_HOST = "raw.githubusercontent.com"
JS_HEAVY_DOMAINS = ("twitter.com", "x.com", "mobile.twitter.com", "mobile.x.com")

# Hosts whose links are never followed out of a tweet (we are already there)
_SOCIAL_DOMAINS = ("twitter.com", "x.com")

# Candidate URLs inside rendered Markdown; trailing punctuation is trimmed after matching
_URL_PATTERN = re.compile(r"https?://[^\s<>\")\]]+")
_TRAILING_PUNCTUATION = re.compile(r"[.,;:!?)]+$")

# Links that are not articles: images, video, PDFs, YouTube, Twitter's media host
LINK_EXCLUSION_PATTERNS = (
    re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|ico)$", re.IGNORECASE),
    re.compile(r"\.(mp4|webm|mov|avi)$", re.IGNORECASE),
    re.compile(r"\.(pdf)$", re.IGNORECASE),
    re.compile(r"^https?://(www\.)?(youtube\.com|youtu\.be)"),
    re.compile(r"^https?://([a-z0-9-]+\.)*twimg\.com", re.IGNORECASE),
)


class UrlKind(str, Enum):
    """Extraction path for a URL."""

    SHORTENER = "shortener"
    GITHUB_BLOB = "github_blob"
    RAW_TEXT = "raw_text"
    JS_HEAVY = "js_heavy"
    GENERIC = "generic"


def _hostname(url: str) -> str:
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError(url, f"unsupported scheme {parsed.scheme!r}")
    try:
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e
    if not hostname:
        raise InvalidUrlError(url, "no hostname")
    return hostname.lower()


def validate_url(url: str) -> str:
    """Return ``url`` stripped of surrounding whitespace if it is a valid http(s) URL.

    Raises:
        InvalidUrlError: If the URL cannot be parsed or has no hostname.
    """
    url = (url or "").strip()
    _hostname(url)
    return url


def _matches_domain(hostname: str, domains: tuple[str, ...]) -> bool:
    return any(hostname == domain or hostname.endswith(f".{domain}") for domain in domains)


def classify(url: str) -> UrlKind:
    """Classify ``url`` into the extraction path that applies to it.

    Raises:
        InvalidUrlError: If the URL is malformed.
    """
    hostname = _hostname(url)
    if hostname in SHORTENER_HOSTS:
        return UrlKind.SHORTENER
    if hostname == GITHUB_HOST and "/blob/" in urlparse(url).path:
        return UrlKind.GITHUB_BLOB
    if hostname == RAW_GITHUB_HOST:
        return UrlKind.RAW_TEXT
    if _matches_domain(hostname, JS_HEAVY_DOMAINS):
        return UrlKind.JS_HEAVY
    return UrlKind.GENERIC


def is_shortener(url: str) -> bool:
    return classify(url) is UrlKind.SHORTENER


def rewrite_github_blob(url: str) -> str:
    """Rewrite a GitHub blob URL to its raw.githubusercontent.com equivalent.

    Other URLs are returned unchanged.

    Example:
        https://github.com/o/r/blob/main/f.md -> https://raw.githubusercontent.com/o/r/main/f.md
    """
    if classify(url) is not UrlKind.GITHUB_BLOB:
        return url
    parsed = urlparse(url)
    path = parsed.path.replace("/blob/", "/", 1)
    return urlunparse(("https", RAW_GITHUB_HOST, path, "", "", ""))


def _is_social_url(hostname: str) -> bool:
    return _matches_domain(hostname, _SOCIAL_DOMAINS)


def find_linked_url(content: str) -> Optional[str]:
    """Return the first external article URL embedded in ``content``.

    Twitter/X URLs are skipped (t.co short links are kept, they usually
    point at the external article), as are URLs matching any of
    :data:`LINK_EXCLUSION_PATTERNS`.
    """
    for raw_url in _URL_PATTERN.findall(content or ""):
        url = _TRAILING_PUNCTUATION.sub("", raw_url)
        try:
            hostname = _hostname(url)
        except InvalidUrlError:
            continue
        if _is_social_url(hostname):
            continue
        if any(pattern.search(url) for pattern in LINK_EXCLUSION_PATTERNS):
            continue
        return url
    return None
