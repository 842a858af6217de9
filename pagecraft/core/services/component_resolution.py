from __future__ import annotations

"""Resolve component-reference sections against the component catalog.

The catalog is fetched from its provider on first use and then treated as a
read-only lookup table for the rest of the editing session. Sections that
reference an unknown component are never altered; they resolve to
placeholder metadata flagged ``missing`` so the editor can show a warning.
"""

from dataclasses import dataclass, field, replace
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pagecraft.core.models.components import (
    ComponentDefinition,
    ComponentField,
    CompositeComponent,
    PrimitiveComponent,
)
from pagecraft.core.models.sections import ComponentSection, Section
from pagecraft.core.storage.catalog import ComponentCatalog
from pagecraft.core.templating import resolve_props
from pagecraft.core.tree import iter_sections

__all__ = [
    "ComponentResolver",
    "ResolvedComponent",
    "ColumnUpdate",
    "PreviewItem",
    "DEFAULT_ICON",
]

logger = logging.getLogger(__name__)

DEFAULT_ICON = "🧩"


@dataclass(frozen=True)
class ResolvedComponent:
    """Display metadata for a component section."""

    name: str
    icon: str
    definition: Optional[ComponentDefinition] = None
    schema: Tuple[ComponentField, ...] = ()
    missing: bool = False
    min_columns: int = 1


@dataclass(frozen=True)
class ColumnUpdate:
    section: ComponentSection
    accepted: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class PreviewItem:
    """One primitive of a composite preview with its props resolved."""

    instance_id: str
    primitive: str
    props: Dict[str, Any] = field(default_factory=dict)
    primitive_name: Optional[str] = None


class ComponentResolver:
    def __init__(self, catalog: ComponentCatalog, max_columns: int = 12) -> None:
        self._catalog = catalog
        self._max_columns = max_columns
        self._primitives: Optional[Dict[str, PrimitiveComponent]] = None
        self._composites: Optional[Dict[str, CompositeComponent]] = None

    @property
    def loaded(self) -> bool:
        return self._primitives is not None

    def load(self) -> None:
        """Fetch the catalog once; later calls are no-ops.

        Storage errors from the provider propagate and leave the resolver
        unloaded so the caller can retry.
        """
        if self.loaded:
            return
        primitives = {c.id: c for c in self._catalog.list_primitives()}
        composites = {c.id: c for c in self._catalog.list_composites()}
        self._primitives, self._composites = primitives, composites
        logger.info("Catalog loaded: %d primitives, %d composites", len(primitives), len(composites))

    def primitives(self) -> List[PrimitiveComponent]:
        self.load()
        return list(self._primitives.values())  # type: ignore[union-attr]

    def composites(self) -> List[CompositeComponent]:
        self.load()
        return list(self._composites.values())  # type: ignore[union-attr]

    def get_definition(self, component_id: str, component_type: Optional[str] = None) -> Optional[ComponentDefinition]:
        """Look *component_id* up; searches both tables when the type is not given."""
        self.load()
        if component_type in (None, "primitive") and component_id in self._primitives:  # type: ignore[operator]
            return self._primitives[component_id]  # type: ignore[index]
        if component_type in (None, "composite") and component_id in self._composites:  # type: ignore[operator]
            return self._composites[component_id]  # type: ignore[index]
        return None

    def resolve(self, section: ComponentSection) -> ResolvedComponent:
        definition = self.get_definition(section.component_id, section.component_type)
        if definition is None:
            logger.debug("Missing component reference id=%s type=%s", section.component_id, section.component_type)
            return ResolvedComponent(
                name=section.label or section.component_id,
                icon=DEFAULT_ICON,
                missing=True,
            )
        return ResolvedComponent(
            name=section.label or definition.name or section.component_id,
            icon=definition.icon or DEFAULT_ICON,
            definition=definition,
            schema=definition.schema,
            min_columns=self._min_columns(definition),
        )

    def _min_columns(self, definition: Optional[ComponentDefinition]) -> int:
        if isinstance(definition, CompositeComponent):
            return max(1, definition.min_columns)
        return 1

    def column_options(self, section: ComponentSection) -> List[int]:
        """Column spans the editor may offer for *section*."""
        definition = self.get_definition(section.component_id, section.component_type)
        return list(range(self._min_columns(definition), self._max_columns + 1))

    def set_columns(self, section: ComponentSection, columns: int) -> ColumnUpdate:
        """Validate and apply a column span change.

        A composite's ``min_columns`` is a hard floor; values outside
        ``1..max_columns`` are rejected as well. Rejections return the
        section unchanged.
        """
        definition = self.get_definition(section.component_id, section.component_type)
        floor = self._min_columns(definition)
        if columns < floor:
            reason = f"Columns must be at least {floor} for this component"
            logger.info("Edit noop: set_columns below_min id=%s columns=%d min=%d", section.id, columns, floor)
            return ColumnUpdate(section, False, reason)
        if columns > self._max_columns:
            logger.info("Edit noop: set_columns above_max id=%s columns=%d", section.id, columns)
            return ColumnUpdate(section, False, f"Columns cannot exceed {self._max_columns}")
        if columns == section.columns:
            return ColumnUpdate(section, True)
        return ColumnUpdate(replace(section, columns=columns), True)

    def preview(self, section: ComponentSection) -> List[PreviewItem]:
        """Resolved primitive props of a composite section, for display only.

        ``{{field}}`` placeholders are substituted from the section's data;
        unbound placeholders stay literal. Primitives and missing components
        have no sub-items and yield an empty list.
        """
        definition = self.get_definition(section.component_id, section.component_type)
        if not isinstance(definition, CompositeComponent):
            return []
        items = []
        for instance in definition.components:
            primitive = self.get_definition(instance.primitive, "primitive")
            items.append(PreviewItem(
                instance_id=instance.id,
                primitive=instance.primitive,
                props=resolve_props(instance.props, section.data),
                primitive_name=primitive.name if primitive is not None else None,
            ))
        return items

    def missing_references(self, forest: Sequence[Section]) -> List[ComponentSection]:
        """Every component section in *forest* whose definition is absent."""
        return [
            node for node in iter_sections(forest)
            if isinstance(node, ComponentSection)
            and self.get_definition(node.component_id, node.component_type) is None
        ]
