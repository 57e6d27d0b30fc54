"""Weighted token index maintenance.

Each entry is indexed over three zones: title, body text and tags. Tokens of
all zones are merged into one row per distinct token; the row keeps a bit mask
of the zones the token appears in. Weights only affect ranking: a token in any
zone makes the entry a candidate.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from webdiary.domains.diary.models import DiaryEntry, SearchToken
from webdiary.domains.diary.search.text import tokenize
from webdiary.extensions import db

logger = logging.getLogger(__name__)

ZONE_TITLE = 1
ZONE_BODY = 2
ZONE_TAGS = 4

# Same ratios as PostgreSQL ts_rank labels A/B/C.
ZONE_WEIGHTS: Dict[int, float] = {
    ZONE_TITLE: 1.0,
    ZONE_BODY: 0.4,
    ZONE_TAGS: 0.2,
}

MAX_TOKEN_LENGTH = 128

SearchDocument = Dict[str, int]


def build_document(title: Optional[str], body_text: Optional[str], tags: Optional[str]) -> SearchDocument:
    """Map each distinct token to the mask of zones containing it."""
    document: SearchDocument = {}
    for zone, text in ((ZONE_TITLE, title), (ZONE_BODY, body_text), (ZONE_TAGS, tags)):
        for token in tokenize(text):
            token = token[:MAX_TOKEN_LENGTH]
            document[token] = document.get(token, 0) | zone
    return document


def zone_score(mask: int) -> float:
    return sum(weight for zone, weight in ZONE_WEIGHTS.items() if mask & zone)


def score_terms(document: Mapping[str, int], terms: Iterable[str]) -> float:
    """Sum of zone weights per query term, matching terms as token prefixes."""
    total = 0.0
    for term in terms:
        mask = 0
        for token, zones in document.items():
            if token.startswith(term):
                mask |= zones
        total += zone_score(mask)
    return total


def _write_document(entry: DiaryEntry) -> None:
    document = build_document(entry.title, entry.body_text, entry.tags)
    SearchToken.query.filter_by(entry_id=entry.id).delete()
    db.session.add_all(
        SearchToken(entry_id=entry.id, user_id=entry.user_id, token=token, zone_mask=mask)
        for token, mask in document.items()
    )
    db.session.flush()


def index_entry(entry: DiaryEntry) -> bool:
    """Recompute ``entry``'s index inside the caller's transaction.

    Runs in a SAVEPOINT: on failure the savepoint is rolled back, the previous
    index rows stay in place (stale) and the entry write itself proceeds.
    Returns whether the index was refreshed.
    """
    if entry.id is None:
        db.session.flush()
    try:
        with db.session.begin_nested():
            _write_document(entry)
    except SQLAlchemyError:
        logger.warning("Search index refresh failed for entry %s; keeping previous index", entry.id, exc_info=True)
        return False
    return True


def remove_entry(entry_id: int) -> None:
    SearchToken.query.filter_by(entry_id=entry_id).delete()


def load_documents(entry_ids: Iterable[int]) -> Dict[int, SearchDocument]:
    """Persisted index of the given entries, keyed by entry id."""
    ids = list(entry_ids)
    documents: Dict[int, SearchDocument] = {entry_id: {} for entry_id in ids}
    if not ids:
        return documents
    rows = (
        db.session.query(SearchToken.entry_id, SearchToken.token, SearchToken.zone_mask)
        .filter(SearchToken.entry_id.in_(ids))
        .all()
    )
    for entry_id, token, mask in rows:
        documents[entry_id][token] = mask
    return documents


def rebuild_index(owner_id: Optional[int] = None, batch_size: int = 200) -> int:
    """Re-derive the index of every entry (optionally one user's) from stored content."""
    query = db.session.query(DiaryEntry.id).order_by(DiaryEntry.id)
    if owner_id is not None:
        query = query.filter(DiaryEntry.user_id == owner_id)
    ids = [entry_id for (entry_id,) in query.all()]
    count = 0
    for start in range(0, len(ids), batch_size):
        for entry in DiaryEntry.query.filter(DiaryEntry.id.in_(ids[start : start + batch_size])).all():
            _write_document(entry)
            count += 1
    db.session.commit()
    logger.info("Rebuilt search index for %s entries", count)
    return count
