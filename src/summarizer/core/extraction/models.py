"""Data models for content extraction."""

from __future__ import annotations

from dataclasses import dataclass

from .html_text import count_words


@dataclass(frozen=True)
class ExtractedContent:
    """Normalized text extracted from a URL.

    Attributes:
        title: Page, file or tweet title
        content: Trimmed Markdown-like text
        url: URL the caller asked for (raw URL for GitHub sources)
        word_count: Whitespace-delimited token count of the content
    """

    title: str
    content: str
    url: str
    word_count: int

    @classmethod
    def from_text(cls, *, title: str, content: str, url: str) -> "ExtractedContent":
        """Build an instance whose ``word_count`` is derived from ``content``."""
        return cls(title=title, content=content, url=url, word_count=count_words(content))

    def with_linked(self, linked: "ExtractedContent") -> "ExtractedContent":
        """Append a linked article below this content.

        The combined word count is the sum of both parts; the separator and
        the linked-article header are not counted.
        """
        combined = f"{self.content}\n\n---\n\n## Linked Article: {linked.title}\n\n{linked.content}"
        return ExtractedContent(
            title=self.title,
            content=combined,
            url=self.url,
            word_count=self.word_count + linked.word_count,
        )
