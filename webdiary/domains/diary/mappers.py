"""Diary mappers for DTO responses."""

from __future__ import annotations

from typing import Optional

from webdiary.domains.diary.models import Attachment, Category, DiaryEntry
from webdiary.domains.diary.schemas.diary_schemas import (
    AttachmentResponse,
    CategoryRef,
    CategoryResponse,
    EntryResponse,
    SearchHitResponse,
    SharedAttachmentResponse,
    SharedEntryResponse,
    TimelineItemResponse,
)
from webdiary.domains.diary.services.search_service import SearchHit
from webdiary.domains.diary.services.view_service import MonthSummary


def _category_ref(category: Optional[Category]) -> Optional[CategoryRef]:
    if category is None:
        return None
    return CategoryRef(id=category.id, name=category.name)


def _attachment_response(attachment: Attachment) -> AttachmentResponse:
    return AttachmentResponse(
        id=attachment.id,
        kind=attachment.kind,
        stored_name=attachment.stored_name,
        display_name=attachment.display_name,
        url=attachment.public_url,
        mime_type=attachment.mime_type,
        size_bytes=attachment.size_bytes,
        created_at=attachment.created_at,
    )


def map_attachment(attachment: Attachment) -> dict:
    return _attachment_response(attachment).model_dump(mode="json")


def map_entry(entry: DiaryEntry) -> dict:
    return EntryResponse(
        id=entry.id,
        date=entry.entry_date,
        title=entry.title,
        body_html=entry.body_html,
        body_text=entry.body_text or "",
        mood=entry.mood,
        weather=entry.weather,
        tags=entry.tag_list,
        visibility=entry.visibility,
        share_token=entry.share_token,
        is_favorite=bool(entry.is_favorite),
        category=_category_ref(entry.category),
        attachments=[_attachment_response(a) for a in entry.attachments],
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    ).model_dump(mode="json")


def map_shared_entry(entry: DiaryEntry) -> dict:
    return SharedEntryResponse(
        id=entry.id,
        date=entry.entry_date,
        title=entry.title,
        body_html=entry.body_html,
        body_text=entry.body_text or "",
        mood=entry.mood,
        weather=entry.weather,
        tags=entry.tag_list,
        attachments=[
            SharedAttachmentResponse(
                id=a.id,
                kind=a.kind,
                display_name=a.display_name,
                url=a.public_url,
                mime_type=a.mime_type,
                size_bytes=a.size_bytes,
            )
            for a in entry.attachments
        ],
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    ).model_dump(mode="json")


def map_search_hit(hit: SearchHit) -> dict:
    entry = hit.entry
    return SearchHitResponse(
        id=entry.id,
        date=entry.entry_date,
        title=entry.title,
        mood=entry.mood,
        weather=entry.weather,
        tags=entry.tag_list,
        is_favorite=bool(entry.is_favorite),
        category=_category_ref(entry.category),
        snippet=hit.snippet,
        score=hit.score,
    ).model_dump(mode="json")


def map_timeline_item(entry: DiaryEntry, attachment_count: int, snippet: str) -> dict:
    return TimelineItemResponse(
        id=entry.id,
        date=entry.entry_date,
        title=entry.title,
        mood=entry.mood,
        tags=entry.tag_list,
        is_favorite=bool(entry.is_favorite),
        category=_category_ref(entry.category),
        attachment_count=attachment_count,
        snippet=snippet,
    ).model_dump(mode="json")


def map_category(category: Category) -> dict:
    return CategoryResponse(id=category.id, name=category.name, created_at=category.created_at).model_dump(mode="json")


def map_month(summary: MonthSummary) -> dict:
    return summary.to_dict()
