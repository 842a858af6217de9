from __future__ import annotations

"""Component catalog providers.

The catalog is read-only from the editor's point of view. Providers return
every primitive and composite definition; the component resolver loads
them once per editing session.
"""

import json
import logging
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from pagecraft.core.exceptions import SectionFormatError, StorageError
from pagecraft.core.models.components import CompositeComponent, PrimitiveComponent
from pagecraft.core.models.settings import ContentPaths
from pagecraft.core.storage.documents import DocumentStore

__all__ = ["ComponentCatalog", "StaticComponentCatalog", "StoreComponentCatalog"]

logger = logging.getLogger(__name__)


@runtime_checkable
class ComponentCatalog(Protocol):
    def list_primitives(self) -> List[PrimitiveComponent]: ...

    def list_composites(self) -> List[CompositeComponent]: ...


class StaticComponentCatalog:
    """Catalog over definitions supplied up front (tests, embedded use)."""

    def __init__(self, primitives: Iterable[PrimitiveComponent] = (),
                 composites: Iterable[CompositeComponent] = ()) -> None:
        self._primitives = list(primitives)
        self._composites = list(composites)

    def list_primitives(self) -> List[PrimitiveComponent]:
        return list(self._primitives)

    def list_composites(self) -> List[CompositeComponent]:
        return list(self._composites)


class StoreComponentCatalog:
    """Catalog read from component documents in a :class:`DocumentStore`.

    Documents that cannot be decoded are skipped with a warning so one bad
    definition does not hide the rest of the catalog. Store failures
    propagate as :class:`StorageError`.
    """

    def __init__(self, store: DocumentStore, paths: Optional[ContentPaths] = None) -> None:
        self._store = store
        self._paths = paths or ContentPaths()

    def list_primitives(self) -> List[PrimitiveComponent]:
        return self._read_all(self._paths.primitives, PrimitiveComponent)

    def list_composites(self) -> List[CompositeComponent]:
        return self._read_all(self._paths.composites, CompositeComponent)

    def _read_all(self, directory: str, cls: type) -> List:
        out = []
        for path in self._store.list_paths(directory):
            text = self._store.load(path)
            if text is None:
                continue
            try:
                out.append(cls.from_dict(json.loads(text)))
            except (ValueError, KeyError, SectionFormatError) as exc:
                logger.warning("I/O FAIL: skipping component %s: %s", path, exc)
        return out
