"""Composable filter clauses over diary entries.

Filters are built as an ordered list of bound SQLAlchemy expressions and
combined with AND; user input is only ever passed as bind parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.sql.elements import ColumnElement

from webdiary.domains.diary.models import DiaryEntry, SearchToken
from webdiary.domains.diary.search.text import query_terms, split_tags


@dataclass(frozen=True)
class EntryFilters:
    """Structured filters shared by search and the date views."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    mood: Optional[str] = None
    weather: Optional[str] = None
    tags: Optional[str] = None
    favorite: Optional[bool] = None
    category_id: Optional[int] = None


def owner_clause(owner_id: int) -> ColumnElement[bool]:
    return DiaryEntry.user_id == owner_id


def date_range_clauses(date_from: Optional[date], date_to: Optional[date]) -> List[ColumnElement[bool]]:
    clauses: List[ColumnElement[bool]] = []
    if date_from is not None:
        clauses.append(DiaryEntry.entry_date >= date_from)
    if date_to is not None:
        clauses.append(DiaryEntry.entry_date <= date_to)
    return clauses


def tags_clause(tags: str) -> Optional[ColumnElement[bool]]:
    """Any listed tag occurring as a case-insensitive substring of the tags field."""
    wanted = split_tags(tags)
    if not wanted:
        return None
    return sa.or_(*(DiaryEntry.tags.icontains(tag, autoescape=True) for tag in wanted))


def filter_clauses(owner_id: int, filters: Optional[EntryFilters] = None) -> List[ColumnElement[bool]]:
    filters = filters or EntryFilters()
    clauses: List[ColumnElement[bool]] = [owner_clause(owner_id)]
    clauses.extend(date_range_clauses(filters.date_from, filters.date_to))
    if filters.mood:
        clauses.append(DiaryEntry.mood == filters.mood)
    if filters.weather:
        clauses.append(DiaryEntry.weather == filters.weather)
    if filters.tags:
        clause = tags_clause(filters.tags)
        if clause is not None:
            clauses.append(clause)
    if filters.favorite:
        clauses.append(DiaryEntry.is_favorite.is_(True))
    if filters.category_id is not None:
        clauses.append(DiaryEntry.category_id == filters.category_id)
    return clauses


def prefix_match_clause(terms: List[str]) -> Optional[ColumnElement[bool]]:
    """Every term must be a prefix of at least one indexed token of the entry."""
    if not terms:
        return None
    return sa.and_(
        *(
            sa.select(SearchToken.id)
            .where(
                SearchToken.entry_id == DiaryEntry.id,
                SearchToken.token.startswith(term, autoescape=True),
            )
            .exists()
            for term in terms
        )
    )


def literal_match_clause(text: str) -> ColumnElement[bool]:
    return sa.or_(
        DiaryEntry.title.icontains(text, autoescape=True),
        DiaryEntry.body_text.icontains(text, autoescape=True),
        DiaryEntry.tags.icontains(text, autoescape=True),
    )


def text_match_clause(text: str) -> ColumnElement[bool]:
    """Indexed prefix match OR literal substring match."""
    literal = literal_match_clause(text)
    prefix = prefix_match_clause(query_terms(text))
    if prefix is None:
        return literal
    return sa.or_(prefix, literal)
