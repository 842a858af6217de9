from __future__ import annotations

"""Construction of new section nodes.

Sections enter a page three ways: from the built-in palette, from the
component catalog, or as a duplicate of an existing subtree. All three
return fresh nodes with newly generated ids.
"""

from dataclasses import replace
import copy
from typing import Any, Callable, Dict, Optional

from pagecraft.core.models.components import CompositeComponent, ComponentDefinition
from pagecraft.core.models.sections import (
    CardGridSection,
    ComponentSection,
    ContentListSection,
    CtaSection,
    HeroSection,
    PALETTE_KINDS,
    Section,
    TextSection,
)
from pagecraft.core.utils import generate_section_id

__all__ = ["create_section", "create_component_section", "duplicate_section", "clamp_columns"]

_PALETTE_DEFAULTS: Dict[str, Callable[[str, int], Section]] = {
    "hero": lambda sid, order: HeroSection(id=sid, order=order, title="", subtitle=""),
    "text": lambda sid, order: TextSection(id=sid, order=order, content=""),
    "cardGrid": lambda sid, order: CardGridSection(id=sid, order=order, cards=(), columns=3),
    "cta": lambda sid, order: CtaSection(id=sid, order=order, heading="", button_text="",
                                         button_link="", style="primary"),
    "contentList": lambda sid, order: ContentListSection(id=sid, order=order, collection="",
                                                         display_mode="cards"),
}


def create_section(kind: str, order: int = 0) -> Section:
    """New built-in section of *kind* with palette defaults.

    Raises ``ValueError`` for kinds that are not offered by the palette.
    """
    if kind not in PALETTE_KINDS:
        raise ValueError(f"Unknown palette section kind '{kind}'")
    return _PALETTE_DEFAULTS[kind](generate_section_id(), order)


def clamp_columns(value: int, min_columns: int = 1, max_columns: int = 12) -> int:
    return min(max(min_columns, 1, value), max_columns)


def create_component_section(definition: ComponentDefinition, order: int = 0,
                             max_columns: int = 12) -> ComponentSection:
    """New component-reference section seeded from a catalog *definition*.

    Composites seed ``columns`` from ``default_columns`` (never below
    ``min_columns``); primitives take the full width. ``data`` starts with
    every declared field default.
    """
    if isinstance(definition, CompositeComponent):
        columns = clamp_columns(definition.default_columns, definition.min_columns, max_columns)
    else:
        columns = max_columns
    data: Dict[str, Any] = {
        f.name: copy.deepcopy(f.default_value) for f in definition.schema if f.has_default()
    }
    return ComponentSection(
        id=generate_section_id(),
        order=order,
        component_id=definition.id,
        component_type=definition.type,
        columns=columns,
        data=data,
    )


def duplicate_section(node: Section, order: Optional[int] = None) -> Section:
    """Deep copy of *node* and its subtree with fresh ids throughout."""
    children = tuple(duplicate_section(child) for child in node.children)
    clone = copy.deepcopy(replace(node, children=()))
    return replace(
        clone,
        id=generate_section_id(),
        order=node.order if order is None else order,
        children=children,
    )
