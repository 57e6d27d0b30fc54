"""Diary request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Visibility = Literal["private", "unlisted", "public"]
ViewMode = Literal["daily", "weekly", "monthly", "yearly"]


class EntryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entry_date: Optional[dt.date] = Field(default=None, validation_alias=AliasChoices("date", "entry_date"))
    title: Optional[str] = Field(default=None, max_length=500)
    body_html: Optional[str] = None
    # Legacy plain-text body; used when body_html is absent.
    content: Optional[str] = None
    mood: Optional[str] = Field(default=None, max_length=64)
    weather: Optional[str] = Field(default=None, max_length=64)
    tags: Optional[Union[str, List[str]]] = None
    visibility: Optional[Visibility] = None
    category_id: Optional[int] = None
    is_favorite: Optional[bool] = None

    @field_validator("title", "mood", "weather", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class AttachmentRename(BaseModel):
    id: int
    display_name: str = Field(
        min_length=1, max_length=255, validation_alias=AliasChoices("display_name", "original_filename")
    )


class EntryUpdatePayload(EntryPayload):
    deleted_attachments: List[int] = Field(default_factory=list)
    renamed_attachments: List[AttachmentRename] = Field(default_factory=list)


class EntryFilterQuery(BaseModel):
    mood: Optional[str] = None
    weather: Optional[str] = None
    tags: Optional[str] = None


class SearchQuery(EntryFilterQuery):
    text: Optional[str] = Field(default=None, max_length=200, validation_alias=AliasChoices("text", "q"))
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    favorite: Optional[bool] = None
    category_id: Optional[int] = None
    limit: Optional[str] = None
    offset: Optional[str] = None


class ViewQuery(EntryFilterQuery):
    view: Optional[ViewMode] = None
    entry_date: Optional[dt.date] = Field(default=None, validation_alias=AliasChoices("date", "entry_date"))


class TimelineQuery(EntryFilterQuery):
    cursor: Optional[str] = None
    limit: Optional[str] = None


class AttachmentRenamePayload(BaseModel):
    display_name: str = Field(
        min_length=1, max_length=255, validation_alias=AliasChoices("display_name", "original_filename")
    )


class CategoryPayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: Optional[dt.datetime] = None


class CategoryRef(BaseModel):
    id: int
    name: str


class AttachmentResponse(BaseModel):
    id: int
    kind: str
    stored_name: str
    display_name: str
    url: Optional[str]
    mime_type: Optional[str]
    size_bytes: Optional[int]
    created_at: Optional[dt.datetime] = None


class EntryResponse(BaseModel):
    id: int
    date: dt.date
    title: Optional[str]
    body_html: Optional[str]
    body_text: str
    mood: Optional[str]
    weather: Optional[str]
    tags: List[str]
    visibility: str
    share_token: Optional[str]
    is_favorite: bool
    category: Optional[CategoryRef]
    attachments: List[AttachmentResponse]
    created_at: dt.datetime
    updated_at: Optional[dt.datetime]


class SharedAttachmentResponse(BaseModel):
    id: int
    kind: str
    display_name: str
    url: Optional[str]
    mime_type: Optional[str]
    size_bytes: Optional[int]


class SharedEntryResponse(BaseModel):
    """Read-only projection served on the share link; never carries the owner."""

    id: int
    date: dt.date
    title: Optional[str]
    body_html: Optional[str]
    body_text: str
    mood: Optional[str]
    weather: Optional[str]
    tags: List[str]
    attachments: List[SharedAttachmentResponse]
    created_at: dt.datetime
    updated_at: Optional[dt.datetime]


class SearchHitResponse(BaseModel):
    id: int
    date: dt.date
    title: Optional[str]
    mood: Optional[str]
    weather: Optional[str]
    tags: List[str]
    is_favorite: bool
    category: Optional[CategoryRef]
    snippet: str
    score: Optional[float] = None


class TimelineItemResponse(BaseModel):
    id: int
    date: dt.date
    title: Optional[str]
    mood: Optional[str]
    tags: List[str]
    is_favorite: bool
    category: Optional[CategoryRef]
    attachment_count: int
    snippet: str
