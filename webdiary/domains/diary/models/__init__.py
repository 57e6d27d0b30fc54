"""Diary domain models."""

from webdiary.domains.diary.models.category import Category
from webdiary.domains.diary.models.diary_entry import Attachment, DiaryEntry
from webdiary.domains.diary.models.search_token import SearchToken

__all__ = ["Attachment", "Category", "DiaryEntry", "SearchToken"]
