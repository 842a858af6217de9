from __future__ import annotations

"""Page aggregate, layouts and local drafts."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pagecraft.core.exceptions import SectionFormatError
from pagecraft.core.models.sections import Section, forest_from_list, forest_to_list

__all__ = ["PageStatus", "Page", "Layout", "DraftMetadata", "Draft", "PageSummary"]


class PageStatus(str, Enum):
    draft = "draft"
    published = "published"


@dataclass(frozen=True)
class Page:
    """Aggregate root: page metadata plus the top-level section forest.

    ``slug`` keys the page in the document store and the draft store. It is
    derived from the title while a page is new and frozen once the page has
    been loaded or saved (enforced by the page lifecycle, not here).
    """

    slug: str = ""
    title: str = ""
    meta_description: Optional[str] = None
    status: PageStatus = PageStatus.draft
    is_landing_page: bool = False
    layout_id: Optional[str] = None
    use_layout: Optional[bool] = True
    sections: Tuple[Section, ...] = ()
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def with_sections(self, sections: Tuple[Section, ...]) -> "Page":
        return replace(self, sections=tuple(sections))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "status": self.status.value,
        }
        if self.meta_description is not None:
            out["metaDescription"] = self.meta_description
        if self.is_landing_page:
            out["isLandingPage"] = True
        if self.layout_id is not None:
            out["layoutId"] = self.layout_id
        if self.use_layout is not None:
            out["useLayout"] = self.use_layout
        out["sections"] = forest_to_list(self.sections)
        if self.created_at is not None:
            out["createdAt"] = self.created_at
        if self.updated_at is not None:
            out["updatedAt"] = self.updated_at
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Page":
        if not isinstance(data, Mapping):
            raise SectionFormatError(f"Page document must be an object, got {type(data).__name__}")
        try:
            status = PageStatus(data.get("status", PageStatus.draft.value))
        except ValueError as exc:
            raise SectionFormatError(f"Unknown page status '{data.get('status')}'", cause=exc) from exc
        try:
            sections = forest_from_list(data.get("sections") or ())
        except TypeError as exc:
            raise SectionFormatError(f"Page sections must be a list: {exc}", cause=exc) from exc
        return cls(
            slug=data.get("slug", ""),
            title=data.get("title", ""),
            meta_description=data.get("metaDescription"),
            status=status,
            is_landing_page=bool(data.get("isLandingPage", False)),
            layout_id=data.get("layoutId"),
            use_layout=data.get("useLayout"),
            sections=sections,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass(frozen=True)
class Layout:
    """Layout reference data; only what the page editor needs to offer a choice."""

    id: str
    name: str = ""
    description: str = ""
    navigation_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Layout":
        return cls(
            id=data["id"],
            name=data.get("name") or data["id"],
            description=data.get("description", ""),
            navigation_id=data.get("navigationId"),
        )


@dataclass(frozen=True)
class DraftMetadata:
    slug: str
    timestamp: int
    version: int

    def to_dict(self) -> Dict[str, Any]:
        return {"slug": self.slug, "timestamp": self.timestamp, "version": self.version}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DraftMetadata":
        return cls(slug=data["slug"], timestamp=int(data["timestamp"]), version=int(data["version"]))


@dataclass(frozen=True)
class Draft:
    """A locally cached, versioned snapshot of an in-progress page edit."""

    metadata: DraftMetadata
    content: Page

    def to_dict(self) -> Dict[str, Any]:
        return {"metadata": self.metadata.to_dict(), "content": self.content.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Draft":
        return cls(
            metadata=DraftMetadata.from_dict(data["metadata"]),
            content=Page.from_dict(data["content"]),
        )


@dataclass(frozen=True)
class PageSummary:
    """Row of the page list."""

    slug: str
    title: str
    status: PageStatus
    is_landing_page: bool = False
    has_draft: bool = False
    updated_at: Optional[str] = None
