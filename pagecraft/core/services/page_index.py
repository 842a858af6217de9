from __future__ import annotations

"""Read-only queries over every page in the document store."""

import json
import logging
from typing import List, Optional

from pagecraft.core.exceptions import SectionFormatError
from pagecraft.core.models.page import Layout, Page, PageSummary
from pagecraft.core.models.settings import ContentPaths
from pagecraft.core.services.page_lifecycle import parse_page
from pagecraft.core.storage.documents import DocumentStore
from pagecraft.core.storage.drafts import DraftStore

__all__ = ["list_pages", "find_landing_page", "load_layouts"]

logger = logging.getLogger(__name__)


def _iter_pages(store: DocumentStore, paths: ContentPaths):
    for path in store.list_paths(paths.pages):
        text = store.load(path)
        if text is None:
            continue
        try:
            yield parse_page(text)
        except SectionFormatError as exc:
            logger.warning("Page: skipping unreadable page %s: %s", path, exc)


def list_pages(store: DocumentStore, drafts: Optional[DraftStore] = None,
               paths: Optional[ContentPaths] = None) -> List[PageSummary]:
    """Summaries of every stored page, sorted by title.

    Raises :class:`~pagecraft.core.exceptions.StorageError` if the store
    cannot be read.
    """
    paths = paths or ContentPaths()
    summaries = [
        PageSummary(
            slug=page.slug,
            title=page.title,
            status=page.status,
            is_landing_page=page.is_landing_page,
            has_draft=drafts.has_draft(page.slug) if drafts is not None else False,
            updated_at=page.updated_at,
        )
        for page in _iter_pages(store, paths)
    ]
    summaries.sort(key=lambda s: (s.title.lower(), s.slug))
    return summaries


def find_landing_page(store: DocumentStore, paths: Optional[ContentPaths] = None) -> Optional[Page]:
    for page in _iter_pages(store, paths or ContentPaths()):
        if page.is_landing_page:
            return page
    return None


def load_layouts(store: DocumentStore, paths: Optional[ContentPaths] = None) -> List[Layout]:
    """Layouts offered to pages, in path order; unreadable layouts are skipped."""
    paths = paths or ContentPaths()
    layouts = []
    for path in store.list_paths(paths.layouts):
        text = store.load(path)
        if text is None:
            continue
        try:
            layouts.append(Layout.from_dict(json.loads(text)))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Layout: skipping unreadable layout %s: %s", path, exc)
    return layouts
