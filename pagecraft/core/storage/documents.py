from __future__ import annotations

"""Document store contract and implementations.

The document store holds the published JSON documents of the site (pages,
layouts and component definitions), addressed by repository-relative path
such as ``src/content/pages/about-us.json``. Every write carries a commit
message so version-controlled backends can record it.

Implementations raise :class:`~pagecraft.core.exceptions.StorageError` for
I/O failures; a missing document is not a failure and loads as ``None``.
Callers that need the document use :func:`load_required`.
"""

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union, runtime_checkable

from pagecraft.core.exceptions import DocumentNotFoundError, StorageError

__all__ = ["DocumentStore", "Commit", "InMemoryDocumentStore", "FileSystemDocumentStore", "load_required"]

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Persistence for published JSON documents."""

    def load(self, path: str) -> Optional[str]:
        """Return the document text at *path*, or ``None`` if it does not exist."""
        ...

    def save(self, path: str, content: str, message: str) -> None:
        """Create or replace the document at *path*."""
        ...

    def delete(self, path: str, message: str) -> None:
        ...

    def list_paths(self, directory: str) -> List[str]:
        """Paths of the ``.json`` documents directly under *directory*, sorted."""
        ...


@dataclass(frozen=True)
class Commit:
    path: str
    message: str
    deleted: bool = False


class InMemoryDocumentStore:
    """Dict-backed store that records every write as a :class:`Commit`."""

    def __init__(self, documents: Optional[Dict[str, str]] = None) -> None:
        self._documents: Dict[str, str] = dict(documents or {})
        self.commits: List[Commit] = []

    def load(self, path: str) -> Optional[str]:
        return self._documents.get(path)

    def save(self, path: str, content: str, message: str) -> None:
        self._documents[path] = content
        self.commits.append(Commit(path, message))
        logger.debug("I/O: saved %s (%s)", path, message)

    def delete(self, path: str, message: str) -> None:
        if self._documents.pop(path, None) is not None:
            self.commits.append(Commit(path, message, deleted=True))

    def list_paths(self, directory: str) -> List[str]:
        prefix = directory.rstrip("/") + "/"
        return sorted(
            p for p in self._documents
            if p.startswith(prefix) and "/" not in p[len(prefix):] and p.endswith(".json")
        )


class FileSystemDocumentStore:
    """Store documents as files under a root directory (a working copy).

    Commit messages are only logged; committing is left to the surrounding
    version control tooling.
    """

    def __init__(self, root: Union[str, Path], encoding: str = "utf-8") -> None:
        self._root = Path(root)
        self._encoding = encoding

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        resolved = (self._root / path).resolve()
        root = self._root.resolve()
        if resolved != root and root not in resolved.parents:
            raise StorageError("Path escapes the store root", path=path)
        return resolved

    def load(self, path: str) -> Optional[str]:
        target = self._resolve(path)
        if not target.is_file():
            return None
        try:
            return target.read_text(encoding=self._encoding)
        except OSError as exc:
            logger.error("I/O FAIL: read %s: %s", path, exc)
            raise StorageError(f"Could not read document: {exc}", path=path, cause=exc) from exc

    def save(self, path: str, content: str, message: str) -> None:
        target = self._resolve(path)
        tmp = target.with_name(target.name + ".tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(content, encoding=self._encoding)
            tmp.replace(target)
        except OSError as exc:
            logger.error("I/O FAIL: write %s: %s", path, exc)
            raise StorageError(f"Could not write document: {exc}", path=path, cause=exc) from exc
        logger.info("I/O: saved %s (%s)", path, message)

    def delete(self, path: str, message: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("I/O FAIL: delete %s: %s", path, exc)
            raise StorageError(f"Could not delete document: {exc}", path=path, cause=exc) from exc
        logger.info("I/O: deleted %s (%s)", path, message)

    def list_paths(self, directory: str) -> List[str]:
        folder = self._resolve(directory)
        if not folder.is_dir():
            return []
        base = directory.rstrip("/")
        try:
            return sorted(f"{base}/{p.name}" for p in folder.iterdir() if p.is_file() and p.suffix == ".json")
        except OSError as exc:
            raise StorageError(f"Could not list documents: {exc}", path=directory, cause=exc) from exc


def load_required(store: DocumentStore, path: str) -> str:
    """Load *path* from *store*, raising :class:`DocumentNotFoundError` if absent."""
    text = store.load(path)
    if text is None:
        raise DocumentNotFoundError(path)
    return text
