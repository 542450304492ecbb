"""Markup removal applied to user text before analysis."""

import re

_MARKDOWN_RULES = (
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),  # **bold**
    (re.compile(r"\*(.*?)\*"), r"\1"),  # *italic*
    (re.compile(r"__(.*?)__"), r"\1"),  # __bold__
    (re.compile(r"_(.*?)_"), r"\1"),  # _italic_
    (re.compile(r"`(.*?)`"), r"\1"),  # `code`
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),  # [label](url)
    (re.compile(r"\[([^\]]+)\]"), r"\1"),  # [label]
)
_HTML_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: str | None) -> str:
    """Strip Markdown emphasis, links and HTML tags, then collapse whitespace."""
    if not value:
        return ""
    text = str(value)
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    text = _HTML_TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()
