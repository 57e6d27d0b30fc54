"""Query planner for full-text search over one owner's entries.

Candidates are selected in SQL (structured filters AND (indexed prefix match
OR literal substring match)) and ranked in Python:

1. title contains the literal text
2. body text contains the literal text
3. weighted prefix score from the persisted token index
4. entry date, then creation time, then id (all newest first)

``limit``/``offset`` apply after ranking; ``total`` counts every candidate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from sqlalchemy.orm import selectinload

from webdiary.core.errors import ValidationError
from webdiary.core.utils.pagination import parse_limit_offset
from webdiary.domains.diary.models import DiaryEntry
from webdiary.domains.diary.search import indexer
from webdiary.domains.diary.search.predicates import EntryFilters, filter_clauses, text_match_clause
from webdiary.domains.diary.search.snippets import DEFAULT_CONTEXT, DEFAULT_PREVIEW_LENGTH, make_snippet
from webdiary.domains.diary.search.text import query_terms
from webdiary.extensions import db

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 200


@dataclass(frozen=True)
class SearchHit:
    entry: DiaryEntry
    snippet: str
    score: Optional[float] = None


@dataclass
class SearchPage:
    total: int
    limit: int
    offset: int
    hits: List[SearchHit] = field(default_factory=list)


@dataclass(frozen=True)
class _Candidate:
    id: int
    rank: tuple


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def _hydrate(ids: List[int]) -> dict[int, DiaryEntry]:
    if not ids:
        return {}
    rows = DiaryEntry.query.options(selectinload(DiaryEntry.attachments)).filter(DiaryEntry.id.in_(ids)).all()
    return {row.id: row for row in rows}


def search_entries(
    owner_id: int,
    *,
    text: Optional[str] = None,
    filters: Optional[EntryFilters] = None,
    limit: Any = None,
    offset: Any = None,
    default_limit: int = 20,
    max_limit: int = 100,
    snippet_context: int = DEFAULT_CONTEXT,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> SearchPage:
    limit_val, offset_val = parse_limit_offset(limit, offset, default_limit=default_limit, max_limit=max_limit)
    text = (text or "").strip()
    if len(text) > MAX_TEXT_LENGTH:
        raise ValidationError(f"text must be at most {MAX_TEXT_LENGTH} characters", field="text")

    clauses = filter_clauses(owner_id, filters)

    if not text:
        query = DiaryEntry.query.filter(*clauses)
        total = query.count()
        rows = (
            query.options(selectinload(DiaryEntry.attachments))
            .order_by(DiaryEntry.entry_date.desc(), DiaryEntry.created_at.desc(), DiaryEntry.id.desc())
            .offset(offset_val)
            .limit(limit_val)
            .all()
        )
        hits = [
            SearchHit(entry=row, snippet=make_snippet(row, None, context=snippet_context, preview_length=preview_length))
            for row in rows
        ]
        return SearchPage(total=total, limit=limit_val, offset=offset_val, hits=hits)

    candidates = (
        db.session.query(
            DiaryEntry.id,
            DiaryEntry.title,
            DiaryEntry.body_text,
            DiaryEntry.entry_date,
            DiaryEntry.created_at,
        )
        .filter(*clauses)
        .filter(text_match_clause(text))
        .all()
    )
    documents = indexer.load_documents(row.id for row in candidates)
    terms = query_terms(text)
    needle = text.lower()

    ranked: List[_Candidate] = []
    scores: dict[int, float] = {}
    for row in candidates:
        score = indexer.score_terms(documents.get(row.id, {}), terms)
        scores[row.id] = score
        rank = (
            _contains(row.title, needle),
            _contains(row.body_text, needle),
            score,
            row.entry_date,
            row.created_at,
            row.id,
        )
        ranked.append(_Candidate(id=row.id, rank=rank))
    ranked.sort(key=lambda c: c.rank, reverse=True)

    page_ids = [c.id for c in ranked[offset_val : offset_val + limit_val]]
    entries = _hydrate(page_ids)
    hits = [
        SearchHit(
            entry=entries[entry_id],
            snippet=make_snippet(entries[entry_id], text, context=snippet_context, preview_length=preview_length),
            score=scores[entry_id],
        )
        for entry_id in page_ids
        if entry_id in entries
    ]
    logger.debug("search owner=%s text=%r total=%s", owner_id, text, len(ranked))
    return SearchPage(total=len(ranked), limit=limit_val, offset=offset_val, hits=hits)
