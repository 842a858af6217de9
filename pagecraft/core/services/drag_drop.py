from __future__ import annotations

"""Drag-and-drop session for the section canvas.

A session is either idle or dragging one source. While dragging, the
surface reports what the pointer is over: a gap between siblings (a drop
target) or the body of a section (a nest target). On release the session
turns the recorded target into a tree operation and returns to idle.

The session holds no page data; it receives the current forest at drop time
and returns the next one inside a :class:`DropResult`.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional, Sequence, Union

from pagecraft.core import tree
from pagecraft.core.models.components import ComponentDefinition
from pagecraft.core.models.factory import create_component_section, create_section
from pagecraft.core.models.sections import PALETTE_KINDS, Section

__all__ = [
    "DragState",
    "PaletteSource",
    "CatalogSource",
    "CanvasSource",
    "DragSource",
    "DropTarget",
    "DropResult",
    "DragDropSession",
]

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    idle = "idle"
    dragging = "dragging"


@dataclass(frozen=True)
class PaletteSource:
    """A built-in section kind dragged from the palette."""

    kind: str


@dataclass(frozen=True)
class CatalogSource:
    """A catalog component dragged onto the canvas."""

    definition: ComponentDefinition


@dataclass(frozen=True)
class CanvasSource:
    """An existing section, identified with its position when the drag began."""

    section_id: str
    index: int
    parent_id: Optional[str] = None


DragSource = Union[PaletteSource, CatalogSource, CanvasSource]


@dataclass(frozen=True)
class DropTarget:
    """Gap *index* in the children of *parent_id* (``None`` = top level)."""

    parent_id: Optional[str]
    index: int


@dataclass(frozen=True)
class DropResult:
    success: bool
    forest: tree.Forest
    operation: str
    section_id: Optional[str] = None
    message: str = ""


class DragDropSession:
    """Single-flight drag interaction state.

    ``begin`` while already dragging replaces the previous source; the
    surface never has two drags in flight.
    """

    def __init__(self, max_columns: int = 12) -> None:
        self._max_columns = max_columns
        self._source: Optional[DragSource] = None
        self._drop_target: Optional[DropTarget] = None
        self._nest_target: Optional[str] = None

    # State -----------------------------------------------------------------

    @property
    def state(self) -> DragState:
        return DragState.dragging if self._source is not None else DragState.idle

    @property
    def source(self) -> Optional[DragSource]:
        return self._source

    @property
    def drop_target(self) -> Optional[DropTarget]:
        return self._drop_target

    @property
    def nest_target(self) -> Optional[str]:
        return self._nest_target

    def begin(self, source: DragSource) -> None:
        if isinstance(source, PaletteSource) and source.kind not in PALETTE_KINDS:
            raise ValueError(f"Unknown palette section kind '{source.kind}'")
        if self._source is not None:
            logger.debug("Drag: replacing in-flight drag source=%s", self._source)
        self._source = source
        self._drop_target = None
        self._nest_target = None
        logger.debug("Drag: begin source=%s", source)

    def hover_gap(self, parent_id: Optional[str], index: int) -> None:
        """Pointer is over the gap *index* of *parent_id*'s children."""
        if self._source is None:
            return
        self._drop_target = DropTarget(parent_id, max(0, index))
        self._nest_target = None

    def hover_node(self, node_id: str, forest: Optional[Sequence[Section]] = None) -> bool:
        """Pointer is over the body of *node_id*: drop would nest inside it.

        Nesting a dragged section into itself is ignored. When *forest* is
        given, nesting into one of the dragged section's descendants is
        ignored too. Returns whether the nest target was recorded.
        """
        if self._source is None:
            return False
        if isinstance(self._source, CanvasSource):
            if node_id == self._source.section_id:
                return False
            if forest is not None:
                dragged = tree.find_by_id(forest, self._source.section_id)
                if dragged is not None and tree.contains_id(dragged, node_id):
                    return False
        self._nest_target = node_id
        self._drop_target = None
        return True

    def clear_target(self) -> None:
        """Pointer left every valid target."""
        self._drop_target = None
        self._nest_target = None

    def cancel(self) -> None:
        if self._source is not None:
            logger.debug("Drag: cancel source=%s", self._source)
        self._reset()

    def _reset(self) -> None:
        self._source = None
        self._drop_target = None
        self._nest_target = None

    # Drop ------------------------------------------------------------------

    def drop(self, forest: Sequence[Section]) -> DropResult:
        """Resolve the drag against *forest* and return to idle.

        Releasing without a target, or onto a target that no longer exists,
        leaves the forest unchanged.
        """
        source, target, nest = self._source, self._drop_target, self._nest_target
        self._reset()
        current = tuple(forest)
        if source is None:
            return DropResult(False, current, "none", message="No drag in progress.")
        if target is None and nest is None:
            logger.debug("Drag: released outside any target")
            return DropResult(False, current, "cancel", message="Dropped outside any target.")

        if nest is not None:
            nest_node = tree.find_by_id(current, nest)
            if nest_node is None:
                return DropResult(False, current, "cancel", message=f"Section '{nest}' not found.")
            target = DropTarget(nest, len(nest_node.children))
        if target.parent_id is not None and tree.find_by_id(current, target.parent_id) is None:
            return DropResult(False, current, "cancel", message=f"Section '{target.parent_id}' not found.")

        if isinstance(source, CanvasSource):
            return self._drop_existing(current, source, target)

        if isinstance(source, PaletteSource):
            node = create_section(source.kind)
        else:
            node = create_component_section(source.definition, max_columns=self._max_columns)
        new_forest = tree.insert_at(current, target.parent_id, node, target.index)
        logger.info("Edit OK: drop insert id=%s type=%s parent=%s index=%d",
                    node.id, node.type, target.parent_id, target.index)
        return DropResult(True, new_forest, "insert", node.id)

    def _drop_existing(self, forest: tree.Forest, source: CanvasSource, target: DropTarget) -> DropResult:
        node = tree.find_by_id(forest, source.section_id)
        if node is None:
            return DropResult(False, forest, "cancel", source.section_id, f"Section '{source.section_id}' not found.")
        if target.parent_id is not None and tree.contains_id(node, target.parent_id):
            logger.info("Edit noop: drop into_own_subtree id=%s parent=%s", source.section_id, target.parent_id)
            return DropResult(False, forest, "cancel", source.section_id, "Cannot drop a section inside itself.")

        origin = tree.sibling_info(forest, source.section_id)
        if origin is None:
            return DropResult(False, forest, "cancel", source.section_id, f"Section '{source.section_id}' not found.")
        if origin.parent_id == target.parent_id:
            new_forest = tree.reorder_within_parent(forest, target.parent_id, origin.index, target.index)
            operation = "reorder"
        else:
            new_forest = tree.move_to_parent(forest, source.section_id, target.parent_id, target.index)
            operation = "reparent"
        if new_forest == forest:
            logger.info("Edit noop: drop %s unchanged id=%s", operation, source.section_id)
            return DropResult(False, forest, operation, source.section_id, "Section is already at that position.")
        logger.info("Edit OK: drop %s id=%s parent=%s index=%d",
                    operation, source.section_id, target.parent_id, target.index)
        return DropResult(True, new_forest, operation, source.section_id)
