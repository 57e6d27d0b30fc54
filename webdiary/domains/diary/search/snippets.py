"""Highlighted excerpts for search results and timeline previews."""

from __future__ import annotations

import re
from typing import Optional

from markupsafe import Markup, escape

from webdiary.domains.diary.models import DiaryEntry

HIGHLIGHT_OPEN = Markup("<mark>")
HIGHLIGHT_CLOSE = Markup("</mark>")
ELLIPSIS = "..."

DEFAULT_CONTEXT = 40
DEFAULT_PREVIEW_LENGTH = 160


def excerpt_around_match(body_text: str, text: str, context: int = DEFAULT_CONTEXT) -> Optional[str]:
    """Window around the first case-insensitive occurrence of ``text``.

    Returns ``None`` when ``text`` does not occur in ``body_text``.
    """
    if not body_text or not text:
        return None
    match = re.search(re.escape(text), body_text, re.IGNORECASE)
    if match is None:
        return None
    start = max(0, match.start() - context)
    end = min(len(body_text), match.end() + context)
    snippet = Markup("")
    if start > 0:
        snippet += ELLIPSIS
    snippet += escape(body_text[start : match.start()])
    snippet += HIGHLIGHT_OPEN + escape(match.group(0)) + HIGHLIGHT_CLOSE
    snippet += escape(body_text[match.end() : end])
    if end < len(body_text):
        snippet += ELLIPSIS
    return str(snippet)


def preview(body_text: Optional[str], title: Optional[str], length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Leading characters of the body, or the title when the body is empty."""
    if not body_text:
        return str(escape(title or ""))
    if len(body_text) <= length:
        return str(escape(body_text))
    return str(escape(body_text[:length].rstrip()) + ELLIPSIS)


def make_snippet(
    entry: DiaryEntry,
    text: Optional[str] = None,
    *,
    context: int = DEFAULT_CONTEXT,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> str:
    text = (text or "").strip()
    if text:
        excerpt = excerpt_around_match(entry.body_text or "", text, context)
        if excerpt is not None:
            return excerpt
    return preview(entry.body_text, entry.title, preview_length)
