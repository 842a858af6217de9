from __future__ import annotations

from typing import Any, Callable, List, Literal, Optional, Sequence, Set

from pagecraft.core import tree
from pagecraft.core.models.sections import ComponentSection, Section
from pagecraft.core.services.component_resolution import ComponentResolver, ResolvedComponent
from pagecraft.core.services.drag_drop import (
    CanvasSource,
    CatalogSource,
    DragDropSession,
    DropResult,
    PaletteSource,
)
from pagecraft.core.services.page_lifecycle import PageLifecycle
from pagecraft.core.services.section_editing_service import (
    EditResult,
    OperationResult,
    SectionEditingService,
)


class PageEditorController:
    """Controller coordinating page editor actions with services.

    This controller maintains transient presentation state (which sections
    are expanded, which one is selected) and delegates every edit to the
    appropriate service. It contains no UI toolkit code and does not perform
    I/O itself.

    Parameters
    ----------
    lifecycle : PageLifecycle
        The editing session of the open page; it owns the section forest.
    editing_service : SectionEditingService
        Service that performs structural edits.
    resolver : ComponentResolver
        Catalog lookups for component sections.
    drag_session : DragDropSession
        Drag-and-drop state of the canvas.

    Notes
    -----
    Methods are non-raising for routine failures; they return result
    objects or booleans.
    """

    def __init__(
        self,
        lifecycle: PageLifecycle,
        resolver: ComponentResolver,
        editing_service: Optional[SectionEditingService] = None,
        drag_session: Optional[DragDropSession] = None,
    ) -> None:
        max_columns = lifecycle.settings.max_columns
        self.lifecycle: PageLifecycle = lifecycle
        self.resolver: ComponentResolver = resolver
        self.editing_service: SectionEditingService = editing_service or SectionEditingService(max_columns)
        self.drag_session: DragDropSession = drag_session or DragDropSession(max_columns)

        # Transient presentation state
        self.expanded_ids: Set[str] = set()
        self.selected_id: Optional[str] = None

    @property
    def sections(self) -> Sequence[Section]:
        return self.lifecycle.sections

    # ---------------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------------

    def _apply_edit(self, mutate: Callable[[Sequence[Section]], EditResult]) -> EditResult:
        """Run a service edit against the page and adopt its forest on success.

        - The lifecycle marks the page dirty and schedules the autosave.
        - On success the touched section becomes the selection and its
          parent is expanded so the result is visible.
        """
        result = self.lifecycle.mutate_sections(mutate)
        if result.success:
            section_id = result.section_id
            if section_id and tree.find_by_id(result.forest, section_id) is not None:
                self.selected_id = section_id
                parent_id = tree.find_parent_id(result.forest, section_id)
                if parent_id is not None:
                    self.expanded_ids.add(parent_id)
            self._prune_presentation_state()
        return result

    def _prune_presentation_state(self) -> None:
        """Forget expanded/selected ids that no longer exist."""
        live = set(tree.collect_ids(self.sections))
        self.expanded_ids &= live
        if self.selected_id is not None and self.selected_id not in live:
            self.selected_id = None

    # ---------------------------------------------------------------------------------
    # Structural edits
    # ---------------------------------------------------------------------------------

    def handle_add_section(self, kind: str, parent_id: Optional[str] = None,
                           index: Optional[int] = None) -> EditResult:
        return self._apply_edit(lambda forest: self.editing_service.add_section(forest, kind, parent_id, index))

    def handle_add_component(self, component_id: str, component_type: Optional[str] = None,
                             parent_id: Optional[str] = None, index: Optional[int] = None) -> EditResult:
        definition = self.resolver.get_definition(component_id, component_type)
        if definition is None:
            return EditResult(False, f"Component '{component_id}' is not in the catalog.",
                              {"component_id": component_id}, tuple(self.sections))
        return self._apply_edit(
            lambda forest: self.editing_service.add_component(forest, definition, parent_id, index)
        )

    def handle_delete(self, section_id: str) -> EditResult:
        return self._apply_edit(lambda forest: self.editing_service.delete_section(forest, section_id))

    def handle_move(self, section_id: str, direction: Literal["up", "down"]) -> EditResult:
        return self._apply_edit(lambda forest: self.editing_service.move_section(forest, section_id, direction))

    def handle_duplicate(self, section_id: str) -> EditResult:
        return self._apply_edit(lambda forest: self.editing_service.duplicate_section(forest, section_id))

    def handle_update(self, section_id: str, **changes: Any) -> EditResult:
        return self._apply_edit(lambda forest: self.editing_service.update_fields(forest, section_id, **changes))

    def handle_set_columns(self, section_id: str, columns: int) -> OperationResult:
        node = tree.find_by_id(self.sections, section_id)
        if not isinstance(node, ComponentSection):
            return OperationResult(False, "Only component sections have a column span.", {"section_id": section_id})
        update = self.resolver.set_columns(node, columns)
        if not update.accepted:
            return OperationResult(False, update.reason or "Column span rejected.",
                                   {"section_id": section_id, "columns": node.columns})
        if update.section is node:
            return OperationResult(True, "Column span unchanged.", {"section_id": section_id})
        return self._apply_edit(lambda forest: self.editing_service.update_section(forest, section_id, update.section))

    # ---------------------------------------------------------------------------------
    # Affordances and presentation state
    # ---------------------------------------------------------------------------------

    def can_move_up(self, section_id: str) -> bool:
        info = tree.sibling_info(self.sections, section_id)
        return info is not None and not info.is_first

    def can_move_down(self, section_id: str) -> bool:
        info = tree.sibling_info(self.sections, section_id)
        return info is not None and not info.is_last

    def toggle_expanded(self, section_id: str) -> bool:
        """Flip the expanded state of *section_id*; returns the new state."""
        if section_id in self.expanded_ids:
            self.expanded_ids.discard(section_id)
            return False
        if tree.find_by_id(self.sections, section_id) is None:
            return False
        self.expanded_ids.add(section_id)
        return True

    def select(self, section_id: Optional[str]) -> bool:
        if section_id is not None and tree.find_by_id(self.sections, section_id) is None:
            return False
        self.selected_id = section_id
        return True

    def resolve_component(self, section_id: str) -> Optional[ResolvedComponent]:
        node = tree.find_by_id(self.sections, section_id)
        if not isinstance(node, ComponentSection):
            return None
        return self.resolver.resolve(node)

    def missing_components(self) -> List[ComponentSection]:
        return self.resolver.missing_references(self.sections)

    # ---------------------------------------------------------------------------------
    # Drag and drop
    # ---------------------------------------------------------------------------------

    def begin_palette_drag(self, kind: str) -> bool:
        try:
            self.drag_session.begin(PaletteSource(kind))
        except ValueError:
            return False
        return True

    def begin_catalog_drag(self, component_id: str, component_type: Optional[str] = None) -> bool:
        definition = self.resolver.get_definition(component_id, component_type)
        if definition is None:
            return False
        self.drag_session.begin(CatalogSource(definition))
        return True

    def begin_section_drag(self, section_id: str) -> bool:
        info = tree.sibling_info(self.sections, section_id)
        if info is None:
            return False
        self.drag_session.begin(CanvasSource(section_id, info.index, info.parent_id))
        return True

    def hover_gap(self, parent_id: Optional[str], index: int) -> None:
        self.drag_session.hover_gap(parent_id, index)

    def hover_node(self, section_id: str) -> bool:
        return self.drag_session.hover_node(section_id, self.sections)

    def cancel_drag(self) -> None:
        self.drag_session.cancel()

    def handle_drop(self) -> DropResult:
        """Resolve the active drag against the page."""
        result = self.lifecycle.mutate_sections(self.drag_session.drop)
        if result.success and result.section_id:
            self.selected_id = result.section_id
            parent_id = tree.find_parent_id(result.forest, result.section_id)
            if parent_id is not None:
                self.expanded_ids.add(parent_id)
        return result
