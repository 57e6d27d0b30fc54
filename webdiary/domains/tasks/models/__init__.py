"""Task domain models."""

from webdiary.domains.tasks.models.task import Task

__all__ = ["Task"]
