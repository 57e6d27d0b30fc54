"""View projector: date windows, month summaries and the timeline stream.

Views read the entry table directly and never touch the search index.
"""

from __future__ import annotations

import base64
import binascii
import calendar
import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy import func
from sqlalchemy.orm import selectinload

from webdiary.core.errors import ValidationError
from webdiary.core.utils.pagination import parse_limit_offset
from webdiary.domains.diary.models import Attachment, DiaryEntry
from webdiary.domains.diary.search.predicates import EntryFilters, date_range_clauses, filter_clauses
from webdiary.extensions import db

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"
VIEW_MODES = (DAILY, WEEKLY, MONTHLY, YEARLY)

_NEWEST_FIRST = (DiaryEntry.entry_date.desc(), DiaryEntry.created_at.desc(), DiaryEntry.id.desc())


@dataclass(frozen=True)
class MonthSummary:
    month: int
    count: int
    dominant_mood: Optional[str]

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "label": calendar.month_name[self.month],
            "count": self.count,
            "dominant_mood": self.dominant_mood,
        }


@dataclass
class ViewResult:
    mode: str
    start: date
    end: date
    entries: List[DiaryEntry]
    day_counts: Dict[str, int] = field(default_factory=dict)
    months: List[MonthSummary] = field(default_factory=list)


@dataclass
class TimelinePage:
    entries: List[DiaryEntry]
    attachment_counts: Dict[int, int]
    next_cursor: Optional[str]

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


def view_window(mode: str, anchor: date) -> Tuple[date, date]:
    """Inclusive ``(start, end)`` of the window containing ``anchor``."""
    if mode == DAILY:
        return anchor, anchor
    if mode == WEEKLY:
        start = anchor - timedelta(days=anchor.weekday())
        return start, start + timedelta(days=6)
    if mode == MONTHLY:
        last = calendar.monthrange(anchor.year, anchor.month)[1]
        return anchor.replace(day=1), anchor.replace(day=last)
    if mode == YEARLY:
        return date(anchor.year, 1, 1), date(anchor.year, 12, 31)
    raise ValidationError(f"Unknown view: {mode}", field="view")


def dominant_mood(moods: Iterable[Optional[str]]) -> Optional[str]:
    """Most frequent mood; ties go to the lexicographically smallest name."""
    counts = Counter(m for m in moods if m)
    if not counts:
        return None
    best = max(counts.values())
    return min(mood for mood, count in counts.items() if count == best)


def summarize_months(entries: Iterable[DiaryEntry]) -> List[MonthSummary]:
    moods: Dict[int, List[Optional[str]]] = {month: [] for month in range(1, 13)}
    for entry in entries:
        moods[entry.entry_date.month].append(entry.mood)
    return [
        MonthSummary(month=month, count=len(values), dominant_mood=dominant_mood(values))
        for month, values in moods.items()
    ]


def count_by_day(entries: Iterable[DiaryEntry]) -> Dict[str, int]:
    counts: Counter[str] = Counter(entry.entry_date.isoformat() for entry in entries)
    return dict(sorted(counts.items()))


def _view_filters(filters: Optional[EntryFilters]) -> EntryFilters:
    # Windows own the date range; only the per-field filters carry over.
    filters = filters or EntryFilters()
    return EntryFilters(mood=filters.mood, weather=filters.weather, tags=filters.tags)


def list_entries(owner_id: int, filters: Optional[EntryFilters] = None) -> List[DiaryEntry]:
    """Every matching entry, newest first."""
    return (
        DiaryEntry.query.options(selectinload(DiaryEntry.attachments))
        .filter(*filter_clauses(owner_id, _view_filters(filters)))
        .order_by(*_NEWEST_FIRST)
        .all()
    )


def get_entries_for_view(
    owner_id: int, mode: str, anchor: Optional[date] = None, filters: Optional[EntryFilters] = None
) -> ViewResult:
    if mode not in VIEW_MODES:
        raise ValidationError(f"Unknown view: {mode}", field="view")
    anchor = anchor or date.today()
    start, end = view_window(mode, anchor)
    entries = (
        DiaryEntry.query.options(selectinload(DiaryEntry.attachments))
        .filter(*filter_clauses(owner_id, _view_filters(filters)))
        .filter(*date_range_clauses(start, end))
        .order_by(*_NEWEST_FIRST)
        .all()
    )
    result = ViewResult(mode=mode, start=start, end=end, entries=entries)
    if mode == YEARLY:
        result.months = summarize_months(entries)
    else:
        result.day_counts = count_by_day(entries)
    return result


def encode_cursor(entry: DiaryEntry) -> str:
    payload = {"d": entry.entry_date.isoformat(), "c": entry.created_at.isoformat(), "i": entry.id}
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> Tuple[date, datetime, int]:
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        return (
            date.fromisoformat(payload["d"]),
            datetime.fromisoformat(payload["c"]),
            int(payload["i"]),
        )
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise ValidationError("Malformed cursor", field="cursor") from exc


def _after_cursor(entry_date: date, created_at: datetime, entry_id: int):
    return sa.or_(
        DiaryEntry.entry_date < entry_date,
        sa.and_(DiaryEntry.entry_date == entry_date, DiaryEntry.created_at < created_at),
        sa.and_(
            DiaryEntry.entry_date == entry_date,
            DiaryEntry.created_at == created_at,
            DiaryEntry.id < entry_id,
        ),
    )


def attachment_counts(entry_ids: List[int]) -> Dict[int, int]:
    if not entry_ids:
        return {}
    rows = (
        db.session.query(Attachment.entry_id, func.count(Attachment.id))
        .filter(Attachment.entry_id.in_(entry_ids))
        .group_by(Attachment.entry_id)
        .all()
    )
    counts = {entry_id: 0 for entry_id in entry_ids}
    counts.update({entry_id: count for entry_id, count in rows})
    return counts


def get_timeline(
    owner_id: int,
    *,
    cursor: Optional[str] = None,
    limit: Any = None,
    filters: Optional[EntryFilters] = None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> TimelinePage:
    """Keyset-paginated stream, newest first; ``cursor`` is the last seen item."""
    limit_val, _ = parse_limit_offset(limit, None, default_limit=default_limit, max_limit=max_limit)
    query = DiaryEntry.query.filter(*filter_clauses(owner_id, _view_filters(filters)))
    if cursor:
        query = query.filter(_after_cursor(*decode_cursor(cursor)))
    rows = query.order_by(*_NEWEST_FIRST).limit(limit_val + 1).all()
    has_more = len(rows) > limit_val
    rows = rows[:limit_val]
    return TimelinePage(
        entries=rows,
        attachment_counts=attachment_counts([row.id for row in rows]),
        next_cursor=encode_cursor(rows[-1]) if has_more and rows else None,
    )


def group_by_month(items: Iterable[Tuple[date, Any]]) -> List[dict]:
    """Consecutive ``(date, item)`` pairs grouped under ``YYYY-MM`` keys."""
    groups: List[dict] = []
    for entry_date, item in items:
        key = entry_date.strftime("%Y-%m")
        if not groups or groups[-1]["month"] != key:
            label = f"{calendar.month_name[entry_date.month]} {entry_date.year}"
            groups.append({"month": key, "label": label, "items": []})
        groups[-1]["items"].append(item)
    return groups
