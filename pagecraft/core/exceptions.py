from __future__ import annotations

"""Exception classes for persistence and document decoding.

Tree edits never raise for routine failures (they return results). These
exceptions cover the external edges: document store and draft store I/O,
and decoding persisted documents into models.
"""

from typing import Optional


class PageCraftError(Exception):
    """Base exception for all PageCraft errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.cause = cause


class StorageError(PageCraftError):
    """Raised when a document store read, write or delete fails.

    Storage errors are retryable: the caller may attempt the same action
    again without any cleanup.
    """

    retryable = True

    def __init__(self, message: str, path: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, cause)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"[{self.path}] {super().__str__()}"
        return super().__str__()


class DocumentNotFoundError(StorageError):
    """Raised when a required document does not exist in the store."""

    retryable = False

    def __init__(self, path: str) -> None:
        super().__init__(f"Document not found: {path}", path=path)


class SectionFormatError(PageCraftError):
    """Raised when a persisted section or component document cannot be decoded."""

    def __init__(self, message: str, section_id: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, cause)
        self.section_id = section_id


__all__ = [
    "PageCraftError",
    "StorageError",
    "DocumentNotFoundError",
    "SectionFormatError",
]
