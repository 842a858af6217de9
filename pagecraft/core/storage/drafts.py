from __future__ import annotations

"""Local draft store.

Drafts are versioned snapshots of in-progress page edits, keyed by slug and
kept apart from the published documents. The envelope written for each
draft is::

    {"metadata": {"slug": ..., "timestamp": <epoch ms>, "version": <int>},
     "content": <page document>}

A draft whose ``version`` differs from the store's current format version is
stale: it is deleted on load and reported as absent, never migrated.

Draft persistence sits on the autosave path, so failures are logged and
reported as ``False`` / ``None`` instead of raised.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Tuple, Union, runtime_checkable

from pagecraft.core.exceptions import SectionFormatError
from pagecraft.core.models.page import Draft, DraftMetadata, Page
from pagecraft.core.models.settings import EditorSettings
from pagecraft.core.utils import epoch_millis

__all__ = ["DraftStore", "InMemoryDraftStore", "FileDraftStore", "DRAFT_VERSION", "draft_store_from_settings"]

logger = logging.getLogger(__name__)

DRAFT_VERSION = 1


@runtime_checkable
class DraftStore(Protocol):
    def save(self, slug: str, page: Page) -> bool: ...

    def load(self, slug: str) -> Optional[Draft]: ...

    def delete(self, slug: str) -> bool: ...

    def has_draft(self, slug: str) -> bool: ...

    def list_drafts(self) -> List[DraftMetadata]: ...

    def clear_all(self) -> int: ...


class _VersionedDraftStore:
    """Envelope handling shared by the concrete stores.

    Subclasses provide raw text access by slug through ``_read``, ``_write``,
    ``_remove`` and ``_slugs``; those may raise ``OSError``.
    """

    def __init__(self, version: int = DRAFT_VERSION) -> None:
        self._version = version

    @property
    def version(self) -> int:
        return self._version

    # Raw access --------------------------------------------------------

    def _read(self, slug: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, slug: str, text: str) -> None:
        raise NotImplementedError

    def _remove(self, slug: str) -> bool:
        raise NotImplementedError

    def _slugs(self) -> Iterator[str]:
        raise NotImplementedError

    # Public API --------------------------------------------------------

    def save(self, slug: str, page: Page) -> bool:
        if not slug:
            logger.warning("I/O FAIL: draft save without slug")
            return False
        draft = Draft(DraftMetadata(slug, epoch_millis(), self._version), page)
        try:
            self._write(slug, json.dumps(draft.to_dict(), ensure_ascii=False))
        except (OSError, TypeError, ValueError) as exc:
            logger.error("I/O FAIL: draft save slug=%s: %s", slug, exc)
            return False
        logger.debug("I/O: draft saved slug=%s", slug)
        return True

    def load(self, slug: str) -> Optional[Draft]:
        parsed = self._parse(slug)
        if parsed is None:
            return None
        metadata, raw = parsed
        if metadata.version != self._version:
            logger.info("I/O: discarding stale draft slug=%s version=%s", slug, metadata.version)
            self.delete(slug)
            return None
        try:
            return Draft(metadata, Page.from_dict(raw["content"]))
        except (KeyError, TypeError, SectionFormatError) as exc:
            logger.warning("I/O FAIL: unreadable draft slug=%s: %s", slug, exc)
            return None

    def delete(self, slug: str) -> bool:
        try:
            return self._remove(slug)
        except OSError as exc:
            logger.error("I/O FAIL: draft delete slug=%s: %s", slug, exc)
            return False

    def has_draft(self, slug: str) -> bool:
        parsed = self._parse(slug)
        return parsed is not None and parsed[0].version == self._version

    def list_drafts(self) -> List[DraftMetadata]:
        """Metadata of every readable current-version draft, most recent first."""
        found: List[DraftMetadata] = []
        try:
            slugs = list(self._slugs())
        except OSError as exc:
            logger.error("I/O FAIL: draft listing: %s", exc)
            return []
        for slug in slugs:
            parsed = self._parse(slug)
            if parsed is not None and parsed[0].version == self._version:
                found.append(parsed[0])
        found.sort(key=lambda m: m.timestamp, reverse=True)
        return found

    def clear_all(self) -> int:
        removed = 0
        try:
            slugs = list(self._slugs())
        except OSError as exc:
            logger.error("I/O FAIL: draft listing: %s", exc)
            return 0
        for slug in slugs:
            if self.delete(slug):
                removed += 1
        return removed

    def _parse(self, slug: str) -> Optional[Tuple[DraftMetadata, Dict]]:
        try:
            text = self._read(slug)
        except OSError as exc:
            logger.error("I/O FAIL: draft read slug=%s: %s", slug, exc)
            return None
        if text is None:
            return None
        try:
            raw = json.loads(text)
            return DraftMetadata.from_dict(raw["metadata"]), raw
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("I/O FAIL: unreadable draft slug=%s: %s", slug, exc)
            return None


class InMemoryDraftStore(_VersionedDraftStore):
    def __init__(self, version: int = DRAFT_VERSION) -> None:
        super().__init__(version)
        self.entries: Dict[str, str] = {}

    def _read(self, slug: str) -> Optional[str]:
        return self.entries.get(slug)

    def _write(self, slug: str, text: str) -> None:
        self.entries[slug] = text

    def _remove(self, slug: str) -> bool:
        return self.entries.pop(slug, None) is not None

    def _slugs(self) -> Iterator[str]:
        return iter(list(self.entries))


class FileDraftStore(_VersionedDraftStore):
    """One JSON file per slug, named ``<prefix><slug>.json``, under *directory*."""

    def __init__(self, directory: Union[str, Path], prefix: str = "pagecraft-draft-",
                 version: int = DRAFT_VERSION) -> None:
        super().__init__(version)
        self._directory = Path(directory)
        self._prefix = prefix

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, slug: str) -> Path:
        safe = slug.replace(os.sep, "_").replace("/", "_")
        return self._directory / f"{self._prefix}{safe}.json"

    def _read(self, slug: str) -> Optional[str]:
        path = self._path(slug)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, slug: str, text: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(slug)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)

    def _remove(self, slug: str) -> bool:
        path = self._path(slug)
        if not path.exists():
            return False
        path.unlink()
        return True

    def _slugs(self) -> Iterator[str]:
        if not self._directory.is_dir():
            return
        for path in sorted(self._directory.glob(f"{self._prefix}*.json")):
            yield path.name[len(self._prefix):-len(".json")]


def draft_store_from_settings(settings: EditorSettings,
                              directory: Optional[Union[str, Path]] = None) -> DraftStore:
    """Draft store using the configured format version and key prefix.

    Drafts are kept in memory unless a *directory* is given.
    """
    if directory is None:
        return InMemoryDraftStore(version=settings.draft_version)
    return FileDraftStore(directory, prefix=settings.draft_key_prefix, version=settings.draft_version)
