from __future__ import annotations

"""Service layer for structural edits on a page's section forest.

This module wraps the pure functions of :mod:`pagecraft.core.tree` into a
UI-agnostic service that returns result objects and logs every edit.

Scope and guarantees:
- Operates purely in-memory on section forests, no file I/O nor UI imports.
- Invalid operations (unknown ids, boundary moves, cyclic nests) return
  ``EditResult(success=False, ...)`` with the input forest unchanged; they
  never raise.
- Successful operations return the new forest; the input is never mutated.

Examples
--------
Basic usage:

    service = SectionEditingService()
    result = service.move_section(page.sections, "section-1", "up")
    if result.success:
        page = page.with_sections(result.forest)
    else:
        print(result.message)
"""

from dataclasses import dataclass, replace
import logging
from typing import Any, Dict, Literal, Optional, Sequence

from pagecraft.core import tree
from pagecraft.core.models.components import ComponentDefinition
from pagecraft.core.models.factory import create_component_section, create_section, duplicate_section
from pagecraft.core.models.sections import PALETTE_KINDS, ComponentSection, Section

__all__ = ["OperationResult", "EditResult", "SectionEditingService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of an editing or lifecycle operation.

    Attributes
    ----------
    success
        Whether the operation completed successfully.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class EditResult(OperationResult):
    """Operation result carrying the forest to adopt.

    ``forest`` is the new forest on success and the unchanged input on
    failure, so callers can always assign it.
    """
    forest: tree.Forest = ()

    @property
    def section_id(self) -> Optional[str]:
        return (self.details or {}).get("section_id")


class SectionEditingService:
    """Encapsulates structural edit operations on a section forest.

    Design principles:
    - No UI dependencies, no disk I/O.
    - No exceptions for expected invalid actions; return :class:`EditResult`.
    - The service holds no page state; every call takes the current forest
      and hands back the next one.
    """

    def __init__(self, max_columns: int = 12) -> None:
        self._max_columns = max_columns

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, forest: Sequence[Section], section_id: str) -> Optional[Section]:
        return tree.find_by_id(forest, section_id)

    def sibling_info(self, forest: Sequence[Section], section_id: str) -> Optional[tree.SiblingInfo]:
        return tree.sibling_info(forest, section_id)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def add_section(
        self,
        forest: Sequence[Section],
        kind: str,
        parent_id: Optional[str] = None,
        index: Optional[int] = None,
    ) -> EditResult:
        """Insert a new palette section of *kind* under *parent_id* at *index*."""
        logger.info("Edit: add_section kind=%s parent=%s index=%s", kind, parent_id, index)
        if kind not in PALETTE_KINDS:
            logger.warning("Edit FAIL: add_section unknown_kind kind=%s", kind)
            return self._fail(forest, f"Unknown section type '{kind}'.", {"kind": kind, "allowed": list(PALETTE_KINDS)})
        return self.insert_section(forest, create_section(kind), parent_id, index)

    def add_component(
        self,
        forest: Sequence[Section],
        definition: ComponentDefinition,
        parent_id: Optional[str] = None,
        index: Optional[int] = None,
    ) -> EditResult:
        """Insert a new component-reference section for a catalog *definition*."""
        logger.info("Edit: add_component component=%s parent=%s index=%s", definition.id, parent_id, index)
        node = create_component_section(definition, max_columns=self._max_columns)
        return self.insert_section(forest, node, parent_id, index)

    def insert_section(
        self,
        forest: Sequence[Section],
        node: Section,
        parent_id: Optional[str] = None,
        index: Optional[int] = None,
    ) -> EditResult:
        if parent_id is not None and tree.find_by_id(forest, parent_id) is None:
            logger.warning("Edit FAIL: insert_section parent_not_found parent=%s", parent_id)
            return self._fail(forest, f"Parent section '{parent_id}' not found.", {"parent_id": parent_id})
        if tree.find_by_id(forest, node.id) is not None:
            logger.warning("Edit FAIL: insert_section duplicate_id id=%s", node.id)
            return self._fail(forest, f"Section id '{node.id}' already exists.", {"section_id": node.id})
        new_forest = tree.insert_at(forest, parent_id, node, index)
        logger.info("Edit OK: insert_section id=%s type=%s parent=%s", node.id, node.type, parent_id)
        return EditResult(True, f"Added {node.type} section.", {"section_id": node.id, "parent_id": parent_id}, new_forest)

    def duplicate_section(self, forest: Sequence[Section], section_id: str) -> EditResult:
        """Insert a deep copy of *section_id* right after the original."""
        logger.info("Edit: duplicate_section id=%s", section_id)
        info = tree.sibling_info(forest, section_id)
        node = tree.find_by_id(forest, section_id)
        if info is None or node is None:
            return self._not_found(forest, "duplicate_section", section_id)
        copy_node = duplicate_section(node)
        new_forest = tree.insert_at(forest, info.parent_id, copy_node, info.index + 1)
        logger.info("Edit OK: duplicate_section id=%s copy=%s", section_id, copy_node.id)
        return EditResult(True, "Duplicated section.", {"section_id": copy_node.id, "source_id": section_id}, new_forest)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def update_section(self, forest: Sequence[Section], section_id: str, new_node: Section) -> EditResult:
        """Replace the payload of *section_id*.

        The replacement keeps the original id; the node's position is
        preserved. Children come from *new_node*.
        """
        logger.info("Edit: update_section id=%s", section_id)
        if tree.find_by_id(forest, section_id) is None:
            return self._not_found(forest, "update_section", section_id)
        if new_node.id != section_id:
            new_node = replace(new_node, id=section_id)
        new_forest = tree.update_by_id(forest, section_id, new_node)
        logger.info("Edit OK: update_section id=%s", section_id)
        return EditResult(True, "Updated section.", {"section_id": section_id}, new_forest)

    def update_fields(self, forest: Sequence[Section], section_id: str, **changes: Any) -> EditResult:
        """Replace selected payload fields of *section_id*, keeping its children."""
        node = tree.find_by_id(forest, section_id)
        if node is None:
            return self._not_found(forest, "update_fields", section_id)
        protected = {"id", "order", "children"} & set(changes)
        if protected:
            logger.warning("Edit FAIL: update_fields protected_fields id=%s fields=%s", section_id, sorted(protected))
            return self._fail(forest, "Structural fields cannot be edited directly.", {"section_id": section_id, "fields": sorted(protected)})
        if isinstance(node, ComponentSection) and "columns" in changes:
            # The span depends on the catalog's minimum; ComponentResolver.set_columns owns it.
            logger.warning("Edit FAIL: update_fields columns_via_resolver id=%s", section_id)
            return self._fail(forest, "Component column span must be changed with the column control.",
                              {"section_id": section_id, "fields": ["columns"]})
        try:
            new_node = replace(node, **changes)
        except (TypeError, ValueError) as exc:
            logger.warning("Edit FAIL: update_fields invalid id=%s: %s", section_id, exc)
            return self._fail(forest, f"Invalid section fields: {exc}", {"section_id": section_id})
        return self.update_section(forest, section_id, new_node)

    def delete_section(self, forest: Sequence[Section], section_id: str) -> EditResult:
        """Delete *section_id* and its whole subtree; later siblings are re-indexed."""
        logger.info("Edit: delete_section id=%s", section_id)
        if tree.find_by_id(forest, section_id) is None:
            return self._not_found(forest, "delete_section", section_id)
        new_forest = tree.delete_by_id(forest, section_id)
        logger.info("Edit OK: delete_section id=%s", section_id)
        return EditResult(True, "Deleted section.", {"section_id": section_id}, new_forest)

    def move_section(
        self,
        forest: Sequence[Section],
        section_id: str,
        direction: Literal["up", "down"],
    ) -> EditResult:
        """Swap *section_id* with its previous or next sibling."""
        logger.info("Edit: move_section direction=%s id=%s", direction, section_id)
        if direction not in ("up", "down"):
            return self._fail(forest, f"Unsupported move direction '{direction}'.", {"allowed": ["up", "down"]})
        info = tree.sibling_info(forest, section_id)
        if info is None:
            return self._not_found(forest, "move_section", section_id)
        if (direction == "up" and info.is_first) or (direction == "down" and info.is_last):
            logger.info("Edit noop: move_section direction=%s boundary id=%s", direction, section_id)
            return self._fail(forest, f"Cannot move {direction} (at boundary).", {"section_id": section_id})
        new_forest = tree.move_sibling(forest, section_id, direction)
        logger.info("Edit OK: move_section direction=%s id=%s", direction, section_id)
        return EditResult(True, f"Moved section {direction}.", {"section_id": section_id}, new_forest)

    def reorder(
        self,
        forest: Sequence[Section],
        parent_id: Optional[str],
        from_index: int,
        to_index: int,
    ) -> EditResult:
        """Move a child of *parent_id* from *from_index* to the gap *to_index*."""
        logger.info("Edit: reorder parent=%s from=%d to=%d", parent_id, from_index, to_index)
        siblings = tree.children_of(forest, parent_id)
        if siblings is None:
            logger.warning("Edit FAIL: reorder parent_not_found parent=%s", parent_id)
            return self._fail(forest, f"Parent section '{parent_id}' not found.", {"parent_id": parent_id})
        if not 0 <= from_index < len(siblings):
            return self._fail(forest, f"Index {from_index} is out of range.", {"parent_id": parent_id, "from_index": from_index})
        new_forest = tree.reorder_within_parent(forest, parent_id, from_index, to_index)
        moved_id = siblings[from_index].id
        if tree.children_of(new_forest, parent_id) == siblings:
            logger.info("Edit noop: reorder unchanged parent=%s from=%d to=%d", parent_id, from_index, to_index)
            return self._fail(forest, "Section is already at that position.", {"section_id": moved_id})
        logger.info("Edit OK: reorder id=%s parent=%s", moved_id, parent_id)
        return EditResult(True, "Reordered section.", {"section_id": moved_id, "parent_id": parent_id}, new_forest)

    def reparent(
        self,
        forest: Sequence[Section],
        section_id: str,
        new_parent_id: Optional[str],
        index: Optional[int] = None,
    ) -> EditResult:
        """Move *section_id* (with its subtree) under *new_parent_id*."""
        logger.info("Edit: reparent id=%s parent=%s index=%s", section_id, new_parent_id, index)
        node = tree.find_by_id(forest, section_id)
        if node is None:
            return self._not_found(forest, "reparent", section_id)
        if new_parent_id is not None:
            if tree.contains_id(node, new_parent_id):
                logger.warning("Edit FAIL: reparent into_own_subtree id=%s parent=%s", section_id, new_parent_id)
                return self._fail(forest, "Cannot move a section into itself or its children.",
                                  {"section_id": section_id, "parent_id": new_parent_id})
            if tree.find_by_id(forest, new_parent_id) is None:
                logger.warning("Edit FAIL: reparent parent_not_found parent=%s", new_parent_id)
                return self._fail(forest, f"Parent section '{new_parent_id}' not found.", {"parent_id": new_parent_id})
        new_forest = tree.move_to_parent(forest, section_id, new_parent_id, index)
        logger.info("Edit OK: reparent id=%s parent=%s", section_id, new_parent_id)
        return EditResult(True, "Moved section.", {"section_id": section_id, "parent_id": new_parent_id}, new_forest)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _fail(forest: Sequence[Section], message: str, details: Optional[Dict[str, Any]] = None) -> EditResult:
        return EditResult(False, message, details, tuple(forest))

    def _not_found(self, forest: Sequence[Section], operation: str, section_id: str) -> EditResult:
        logger.warning("Edit FAIL: %s section_not_found id=%s", operation, section_id)
        return self._fail(forest, f"Section not found for id '{section_id}'.", {"section_id": section_id})
