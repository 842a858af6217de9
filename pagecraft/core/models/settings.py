"""Editor settings models.

Typed views over the ``editor.yml`` configuration section: autosave timing,
draft format version and the deterministic document-store paths used for
pages, layouts and component definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from pagecraft.core.models.sections import GRID_COLUMNS


@dataclass(frozen=True)
class ContentPaths:
    """Directory roots inside the document store, one JSON document per record."""

    pages: str = "src/content/pages"
    layouts: str = "src/content/layouts"
    primitives: str = "src/content/components/primitives"
    composites: str = "src/content/components/composites"

    def page_path(self, slug: str) -> str:
        return f"{self.pages}/{slug}.json"

    def layout_path(self, layout_id: str) -> str:
        return f"{self.layouts}/{layout_id}.json"

    def primitive_path(self, component_id: str) -> str:
        return f"{self.primitives}/{component_id}.json"

    def composite_path(self, component_id: str) -> str:
        return f"{self.composites}/{component_id}.json"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ContentPaths":
        defaults = cls()
        return cls(
            pages=str(data.get("pages", defaults.pages)).rstrip("/"),
            layouts=str(data.get("layouts", defaults.layouts)).rstrip("/"),
            primitives=str(data.get("primitives", defaults.primitives)).rstrip("/"),
            composites=str(data.get("composites", defaults.composites)).rstrip("/"),
        )


@dataclass(frozen=True)
class EditorSettings:
    """Page editor behaviour knobs."""

    autosave_delay_seconds: float = 3.0
    draft_version: int = 1
    draft_key_prefix: str = "pagecraft-draft-"
    max_columns: int = 12
    content_paths: ContentPaths = field(default_factory=ContentPaths)

    def __post_init__(self) -> None:
        if self.autosave_delay_seconds < 0:
            raise ValueError("autosave_delay_seconds cannot be negative")
        if not 1 <= self.max_columns <= GRID_COLUMNS:
            raise ValueError(f"max_columns must be between 1 and {GRID_COLUMNS}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EditorSettings":
        """Build settings from a (possibly partial) configuration mapping."""
        defaults = cls()
        return cls(
            autosave_delay_seconds=float(data.get("autosave_delay_seconds", defaults.autosave_delay_seconds)),
            draft_version=int(data.get("draft_version", defaults.draft_version)),
            draft_key_prefix=str(data.get("draft_key_prefix", defaults.draft_key_prefix)),
            max_columns=int(data.get("max_columns", defaults.max_columns)),
            content_paths=ContentPaths.from_mapping(data.get("content_paths") or {}),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "autosave_delay_seconds": self.autosave_delay_seconds,
            "draft_version": self.draft_version,
            "draft_key_prefix": self.draft_key_prefix,
            "max_columns": self.max_columns,
            "content_paths": {
                "pages": self.content_paths.pages,
                "layouts": self.content_paths.layouts,
                "primitives": self.content_paths.primitives,
                "composites": self.content_paths.composites,
            },
        }
