"""Service layer for page editing.

Services are UI-agnostic and return result objects for expected failures.
"""

from .component_resolution import ColumnUpdate, ComponentResolver, PreviewItem, ResolvedComponent
from .drag_drop import (
    CanvasSource,
    CatalogSource,
    DragDropSession,
    DragState,
    DropResult,
    DropTarget,
    PaletteSource,
)
from .page_index import find_landing_page, list_pages, load_layouts
from .page_lifecycle import LifecycleState, PageLifecycle, ValidationResult
from .section_editing_service import EditResult, OperationResult, SectionEditingService

__all__ = [
    "CanvasSource",
    "CatalogSource",
    "ColumnUpdate",
    "ComponentResolver",
    "DragDropSession",
    "DragState",
    "DropResult",
    "DropTarget",
    "EditResult",
    "LifecycleState",
    "OperationResult",
    "PageLifecycle",
    "PaletteSource",
    "PreviewItem",
    "ResolvedComponent",
    "SectionEditingService",
    "ValidationResult",
    "find_landing_page",
    "list_pages",
    "load_layouts",
]
