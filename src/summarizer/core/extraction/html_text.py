"""HTML fragment to Markdown-like text conversion.

Pure helpers shared by every extraction strategy:
    - html_to_markdown(fragment) -> str
    - clean_markdown(markdown) -> str
    - count_words(text) -> int
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup
from markdownify import ATX, markdownify

# Elements whose content is never part of the readable text
REMOVED_TAGS = ("script", "style", "nav", "footer", "aside", "header", "noscript", "iframe")

_WHITESPACE_ONLY_LINE = re.compile(r"^[ \t\r\f\v]+$", re.MULTILINE)
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def count_words(text: str) -> int:
    """Count whitespace-delimited, non-empty tokens in ``text``."""
    return len((text or "").split())


def clean_markdown(markdown: str) -> str:
    """Normalize converted Markdown.

    Blanks whitespace-only lines, collapses runs of 3+ newlines to exactly
    two, and trims the result. The output never contains three
    consecutive newlines.
    """
    text = _WHITESPACE_ONLY_LINE.sub("", markdown or "")
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def html_to_markdown(fragment_html: str) -> str:
    """Convert an HTML fragment to Markdown.

    Script/style/chrome elements are dropped together with their content;
    links are flattened to their visible text. The result is not cleaned,
    pass it through :func:`clean_markdown`.
    """
    fragment_html = fragment_html or ""
    if not fragment_html.strip():
        return ""

    soup = BeautifulSoup(fragment_html, "lxml")
    for element in soup.find_all(REMOVED_TAGS):
        if not element.decomposed:
            element.decompose()

    return markdownify(
        str(soup),
        heading_style=ATX,
        bullets="-",
        strip=["a"],
    )
