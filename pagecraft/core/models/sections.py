from __future__ import annotations

"""Section node model for the page composition tree.

A page is an ordered forest of :class:`Section` nodes. Every node carries an
id, its zero-based ``order`` among siblings, an optional tuple of child
sections and optional style overrides; the concrete subclass carries the
variant payload. Nodes are frozen: edits build new nodes via
:func:`dataclasses.replace`, so a forest can be shared safely between the
editing surface, autosave and publish.

The JSON shape mirrors the persisted page documents (camelCase keys, a
``type`` discriminant, absent optionals omitted).
"""

from dataclasses import dataclass, field, fields, replace
import copy
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pagecraft.core.exceptions import SectionFormatError

__all__ = [
    "StyleOverrides",
    "Card",
    "Section",
    "HeroSection",
    "TextSection",
    "CardGridSection",
    "CtaSection",
    "ContentListSection",
    "ComponentSection",
    "GRID_COLUMNS",
    "SECTION_KINDS",
    "PALETTE_KINDS",
    "section_from_dict",
    "forest_from_list",
    "forest_to_list",
]

_BASE_FIELDS = frozenset({"id", "order", "children", "style_overrides"})

# Width of the page layout grid; component sections span 1..GRID_COLUMNS.
GRID_COLUMNS = 12


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _plain(value: Any) -> Any:
    """Convert a payload value to its JSON-ready form."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return copy.deepcopy(value)
    return value


@dataclass(frozen=True)
class StyleOverrides:
    """Sparse presentation overrides; never affects tree structure.

    Values are theme token keys (``"primary"``, ``"md"``) except for the
    free-form image URL, background position and custom classes.
    """

    background_color: Optional[str] = None
    background_image: Optional[str] = None
    background_size: Optional[str] = None
    background_position: Optional[str] = None
    text_color: Optional[str] = None
    font_family: Optional[str] = None
    padding_top: Optional[str] = None
    padding_bottom: Optional[str] = None
    custom_classes: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> Dict[str, str]:
        return {
            _camel(f.name): getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StyleOverrides":
        if not isinstance(data, Mapping):
            raise TypeError(f"styleOverrides must be an object, got {type(data).__name__}")
        return cls(**{f.name: data.get(_camel(f.name)) for f in fields(cls)})


@dataclass(frozen=True)
class Card:
    title: str = ""
    description: str = ""
    image_url: Optional[str] = None
    link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"title": self.title, "description": self.description}
        if self.image_url is not None:
            out["imageUrl"] = self.image_url
        if self.link is not None:
            out["link"] = self.link
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Card":
        if not isinstance(data, Mapping):
            raise TypeError(f"Card must be an object, got {type(data).__name__}")
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            image_url=data.get("imageUrl"),
            link=data.get("link"),
        )


@dataclass(frozen=True)
class Section:
    """Base node of the composition tree.

    Attributes
    ----------
    id
        Opaque identifier, unique within a page and never reused.
    order
        Zero-based position among siblings; equals the list index after
        every tree operation.
    children
        Ordered child sections. Any kind may hold children; grouping kinds
        give them meaning when rendered.
    style_overrides
        Optional presentation overrides, orthogonal to structure.
    """

    id: str
    order: int = 0
    children: Tuple["Section", ...] = ()
    style_overrides: Optional[StyleOverrides] = None

    kind: ClassVar[str] = ""

    @property
    def type(self) -> str:
        return self.kind

    def has_children(self) -> bool:
        return len(self.children) > 0

    def with_order(self, order: int) -> "Section":
        """Return this node with ``order`` set, reusing it when unchanged."""
        if self.order == order:
            return self
        return replace(self, order=order)

    def with_children(self, children: Iterable["Section"]) -> "Section":
        return replace(self, children=tuple(children))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "type": self.kind, "order": self.order}
        for f in fields(self):
            if f.name in _BASE_FIELDS:
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            out[_camel(f.name)] = _plain(value)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        if self.style_overrides is not None and not self.style_overrides.is_empty():
            out["styleOverrides"] = self.style_overrides.to_dict()
        return out

    @classmethod
    def _coerce(cls, name: str, value: Any) -> Any:
        """Convert a raw JSON payload value for field *name*; subclasses extend."""
        if isinstance(value, list):
            return tuple(value)
        return value

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "Section":
        section_id = data.get("id")
        if not isinstance(section_id, str) or not section_id:
            raise SectionFormatError(f"Section of type '{cls.kind}' has no id")
        # Children that fail to decode raise their own SectionFormatError.
        try:
            kwargs: Dict[str, Any] = {
                "id": section_id,
                "order": int(data.get("order", 0)),
                "children": tuple(section_from_dict(c) for c in data.get("children") or ()),
            }
            style = data.get("styleOverrides")
            if style:
                kwargs["style_overrides"] = StyleOverrides.from_dict(style)
            for f in fields(cls):
                if f.name in _BASE_FIELDS:
                    continue
                key = _camel(f.name)
                if key in data and data[key] is not None:
                    kwargs[f.name] = cls._coerce(f.name, data[key])
            return cls(**kwargs)
        except (TypeError, ValueError) as exc:
            raise SectionFormatError(str(exc), section_id=section_id, cause=exc) from exc


@dataclass(frozen=True)
class HeroSection(Section):
    title: str = ""
    subtitle: Optional[str] = None
    background_image: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None

    kind: ClassVar[str] = "hero"


@dataclass(frozen=True)
class TextSection(Section):
    heading: Optional[str] = None
    content: str = ""

    kind: ClassVar[str] = "text"


@dataclass(frozen=True)
class CardGridSection(Section):
    heading: Optional[str] = None
    cards: Tuple[Card, ...] = ()
    columns: int = 3

    kind: ClassVar[str] = "cardGrid"

    def __post_init__(self) -> None:
        if self.columns not in (2, 3, 4):
            raise ValueError(f"Card grid columns must be 2, 3 or 4, got {self.columns}")

    @classmethod
    def _coerce(cls, name: str, value: Any) -> Any:
        if name == "cards":
            return tuple(Card.from_dict(c) for c in value)
        return super()._coerce(name, value)


@dataclass(frozen=True)
class CtaSection(Section):
    heading: str = ""
    button_text: str = ""
    button_link: str = ""
    style: str = "primary"

    kind: ClassVar[str] = "cta"

    def __post_init__(self) -> None:
        if self.style not in ("primary", "secondary"):
            raise ValueError(f"Unknown call-to-action style '{self.style}'")


@dataclass(frozen=True)
class ContentListSection(Section):
    heading: Optional[str] = None
    collection: str = ""
    display_mode: str = "cards"
    item_ids: Optional[Tuple[str, ...]] = None
    limit: Optional[int] = None
    columns: Optional[int] = None
    show_filters: Optional[bool] = None

    kind: ClassVar[str] = "contentList"

    def __post_init__(self) -> None:
        if self.display_mode not in ("cards", "table", "list"):
            raise ValueError(f"Unknown content list display mode '{self.display_mode}'")


@dataclass(frozen=True)
class ComponentSection(Section):
    """Reference to a catalog component plus the page-local data bag.

    ``data`` is keyed by the component's declared field names. Treat it as
    read-only; use :meth:`with_data` to change a value.
    """

    component_id: str = ""
    component_type: str = "primitive"
    columns: int = 12
    data: Dict[str, Any] = field(default_factory=dict)
    label: Optional[str] = None

    kind: ClassVar[str] = "component"

    def __post_init__(self) -> None:
        if self.component_type not in ("primitive", "composite"):
            raise ValueError(f"Unknown component type '{self.component_type}'")
        if isinstance(self.columns, bool) or not isinstance(self.columns, int):
            raise TypeError(f"Component columns must be an integer, got {self.columns!r}")
        if not 1 <= self.columns <= GRID_COLUMNS:
            raise ValueError(f"Component columns must be between 1 and {GRID_COLUMNS}, got {self.columns}")

    def with_data(self, key: str, value: Any) -> "ComponentSection":
        new_data = dict(self.data)
        new_data[key] = value
        return replace(self, data=new_data)

    @classmethod
    def _coerce(cls, name: str, value: Any) -> Any:
        if name == "data":
            if not isinstance(value, Mapping):
                raise TypeError(f"Component data must be an object, got {type(value).__name__}")
            return dict(value)
        return super()._coerce(name, value)


SECTION_KINDS: Dict[str, Type[Section]] = {
    cls.kind: cls
    for cls in (HeroSection, TextSection, CardGridSection, CtaSection, ContentListSection, ComponentSection)
}

# Built-in kinds offered by the add-section palette.
PALETTE_KINDS: Tuple[str, ...] = ("hero", "text", "cardGrid", "cta", "contentList")


def section_from_dict(data: Mapping[str, Any]) -> Section:
    """Decode one persisted section (and its subtree).

    Raises
    ------
    SectionFormatError
        If the discriminant is unknown or the payload is malformed.
    """
    if not isinstance(data, Mapping):
        raise SectionFormatError(f"Section must be an object, got {type(data).__name__}")
    kind = data.get("type")
    cls = SECTION_KINDS.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise SectionFormatError(f"Unknown section type '{kind}'", section_id=data.get("id"))
    return cls._from_dict(data)


def forest_from_list(items: Iterable[Mapping[str, Any]]) -> Tuple[Section, ...]:
    return tuple(section_from_dict(item) for item in items)


def forest_to_list(forest: Iterable[Section]) -> List[Dict[str, Any]]:
    return [section.to_dict() for section in forest]
