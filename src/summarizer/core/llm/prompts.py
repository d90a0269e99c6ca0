"""Summarization prompt building.

The prompt is a pure function of its inputs: no configuration lookup and
no I/O happen here, callers resolve defaults first.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import SummaryLength

DEFAULT_PROMPT_TEMPLATE = """Summarize the following content in approximately {{wordCount}} words.

Instructions:
- Lead with the key points and main ideas
- {{language}}
- Use clear, concise language
- Maintain the original meaning and intent
- Do not include meta-commentary like "This article discusses..."
- Start directly with the summary content

Content to summarize:
---
{{content}}
---

Summary:"""

AUTO_LANGUAGE_INSTRUCTION = "Write the summary in the same language as the source content."

_PLACEHOLDER = re.compile(r"\{\{(content|wordCount|language)\}\}")


def language_instruction(language: Optional[str]) -> str:
    """Return the sentence that tells the model which language to write in."""
    language = (language or "").strip()
    if language:
        return f"Write the summary in {language}."
    return AUTO_LANGUAGE_INSTRUCTION


def build_prompt(
    content: str,
    length: SummaryLength | str = SummaryLength.MEDIUM,
    language: Optional[str] = None,
    template: Optional[str] = None,
) -> str:
    """Build the final summarization prompt.

    Substitutes ``{{content}}``, ``{{wordCount}}`` and ``{{language}}`` in
    ``template`` (or the built-in template when ``template`` is empty).
    Substitution is single-pass, so placeholder-like text inside the
    content is left untouched.

    Args:
        content: Text to summarize.
        length: Target length label.
        language: Output language; empty for auto-detect.
        template: Optional custom template.

    Returns:
        The prompt string.
    """
    values = {
        "content": content,
        "wordCount": str(SummaryLength.parse(length).word_count),
        "language": language_instruction(language),
    }
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template or DEFAULT_PROMPT_TEMPLATE)
