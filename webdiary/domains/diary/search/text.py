"""Plain-text projection and tokenization."""

from __future__ import annotations

import html
import re
from typing import Iterable, List, Optional

_SCRIPT_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"\w+", re.UNICODE)


def html_to_text(body_html: Optional[str]) -> str:
    """Best-effort text content of an HTML fragment."""
    if not body_html:
        return ""
    text = _SCRIPT_STYLE.sub(" ", body_html)
    text = _TAG.sub(" ", text)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()


def derive_body_text(body_html: Optional[str], content: Optional[str]) -> str:
    """Canonical body text: from HTML when present, else the legacy plain field."""
    if body_html and body_html.strip():
        return html_to_text(body_html)
    return (content or "").strip()


def tokenize(text: Optional[str]) -> List[str]:
    """Lower-cased word tokens in order of appearance; no stemming."""
    if not text:
        return []
    return [match.group(0).lower() for match in _WORD.finditer(text)]


def query_terms(text: str) -> List[str]:
    """Whitespace-delimited query terms, lower-cased and de-duplicated."""
    seen: list[str] = []
    for raw in text.split():
        term = raw.strip().lower()
        if term and term not in seen:
            seen.append(term)
    return seen


def split_tags(tags: Optional[str]) -> List[str]:
    return [t.strip() for t in (tags or "").split(",") if t.strip()]


def normalize_tags(tags: Optional[Iterable[str] | str]) -> Optional[str]:
    """Store tags as a trimmed comma separated string (``None`` when empty)."""
    if tags is None:
        return None
    parts = split_tags(tags) if isinstance(tags, str) else [str(t).strip() for t in tags if str(t).strip()]
    return ", ".join(parts) or None
