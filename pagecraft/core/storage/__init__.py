"""Persistence contracts and their bundled implementations.

- :mod:`documents`: published JSON documents (pages, layouts, components)
- :mod:`drafts`: versioned local drafts keyed by slug
- :mod:`catalog`: read-only component catalog providers
"""

from .catalog import ComponentCatalog, StaticComponentCatalog, StoreComponentCatalog
from .documents import Commit, DocumentStore, FileSystemDocumentStore, InMemoryDocumentStore, load_required
from .drafts import DRAFT_VERSION, DraftStore, FileDraftStore, InMemoryDraftStore, draft_store_from_settings

__all__ = [
    "Commit",
    "ComponentCatalog",
    "DRAFT_VERSION",
    "DocumentStore",
    "DraftStore",
    "FileDraftStore",
    "FileSystemDocumentStore",
    "InMemoryDocumentStore",
    "InMemoryDraftStore",
    "StaticComponentCatalog",
    "StoreComponentCatalog",
    "draft_store_from_settings",
    "load_required",
]
