from __future__ import annotations

"""Shared data structures used across the PageCraft core.

This package exposes the frozen dataclasses used by services and other core
layers: the section tree, component catalog definitions, the page aggregate,
drafts and editor settings. It is free of UI and I/O code so the contained
objects can be reused in any context (unit tests, CLI, web front-ends).
"""

from .components import (
    ComponentDefinition,
    ComponentField,
    CompositeComponent,
    CompositeInstance,
    PrimitiveComponent,
    component_from_dict,
)
from .factory import clamp_columns, create_component_section, create_section, duplicate_section
from .page import Draft, DraftMetadata, Layout, Page, PageStatus, PageSummary
from .sections import (
    GRID_COLUMNS,
    PALETTE_KINDS,
    SECTION_KINDS,
    Card,
    CardGridSection,
    ComponentSection,
    ContentListSection,
    CtaSection,
    HeroSection,
    Section,
    StyleOverrides,
    TextSection,
    forest_from_list,
    forest_to_list,
    section_from_dict,
)
from .settings import ContentPaths, EditorSettings

__all__ = [
    "Card",
    "CardGridSection",
    "ComponentDefinition",
    "ComponentField",
    "ComponentSection",
    "CompositeComponent",
    "CompositeInstance",
    "ContentListSection",
    "ContentPaths",
    "CtaSection",
    "Draft",
    "DraftMetadata",
    "EditorSettings",
    "GRID_COLUMNS",
    "HeroSection",
    "Layout",
    "PALETTE_KINDS",
    "Page",
    "PageStatus",
    "PageSummary",
    "PrimitiveComponent",
    "SECTION_KINDS",
    "Section",
    "StyleOverrides",
    "TextSection",
    "clamp_columns",
    "component_from_dict",
    "create_component_section",
    "create_section",
    "duplicate_section",
    "forest_from_list",
    "forest_to_list",
    "section_from_dict",
]
