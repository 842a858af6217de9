from __future__ import annotations

"""Component catalog definitions.

Primitive components are atomic building blocks with a declared field
schema. Composite components arrange primitive instances whose props may
reference the composite's own data fields through ``{{fieldName}}``
placeholders. The editor never mutates these definitions; it only resolves
component sections against them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pagecraft.core.exceptions import SectionFormatError

__all__ = [
    "ComponentField",
    "PrimitiveComponent",
    "CompositeInstance",
    "CompositeComponent",
    "ComponentDefinition",
    "component_from_dict",
]

FIELD_TYPES = ("string", "number", "boolean", "array", "object", "enum", "date")


@dataclass(frozen=True)
class ComponentField:
    """One entry of a component's data-entry schema."""

    name: str
    label: str = ""
    type: str = "string"
    required: bool = False
    default_value: Any = None
    description: Optional[str] = None
    multiline: bool = False
    item_type: Optional[str] = None
    values: Optional[Tuple[str, ...]] = None

    def has_default(self) -> bool:
        return self.default_value is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ComponentField":
        name = data.get("name")
        if not name:
            raise SectionFormatError("Component field has no name")
        field_type = data.get("type", "string")
        if field_type not in FIELD_TYPES:
            raise SectionFormatError(f"Component field '{name}' has unknown type '{field_type}'")
        values = data.get("values")
        return cls(
            name=name,
            label=data.get("label") or name,
            type=field_type,
            required=bool(data.get("required", False)),
            default_value=data.get("defaultValue"),
            description=data.get("description"),
            multiline=bool(data.get("multiline", False)),
            item_type=data.get("itemType"),
            values=tuple(values) if values is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "required": self.required,
        }
        if self.default_value is not None:
            out["defaultValue"] = self.default_value
        if self.description is not None:
            out["description"] = self.description
        if self.multiline:
            out["multiline"] = True
        if self.item_type is not None:
            out["itemType"] = self.item_type
        if self.values is not None:
            out["values"] = list(self.values)
        return out


@dataclass(frozen=True)
class PrimitiveComponent:
    id: str
    name: str
    description: str = ""
    fields: Tuple[ComponentField, ...] = ()
    icon: Optional[str] = None

    type: str = field(default="primitive", init=False)

    @property
    def schema(self) -> Tuple[ComponentField, ...]:
        return self.fields

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PrimitiveComponent":
        return cls(
            id=_require_id(data),
            name=data.get("name") or data["id"],
            description=data.get("description", ""),
            fields=tuple(ComponentField.from_dict(f) for f in data.get("fields") or ()),
            icon=data.get("icon"),
        )


@dataclass(frozen=True)
class CompositeInstance:
    """A primitive placed inside a composite, with bound (possibly templated) props."""

    id: str
    primitive: str
    props: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompositeInstance":
        return cls(
            id=data.get("id", ""),
            primitive=data.get("primitive", ""),
            props=dict(data.get("props") or {}),
        )


@dataclass(frozen=True)
class CompositeComponent:
    id: str
    name: str
    description: str = ""
    components: Tuple[CompositeInstance, ...] = ()
    data_schema: Tuple[ComponentField, ...] = ()
    min_columns: int = 1
    default_columns: int = 12
    icon: Optional[str] = None

    type: str = field(default="composite", init=False)

    @property
    def schema(self) -> Tuple[ComponentField, ...]:
        return self.data_schema

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompositeComponent":
        return cls(
            id=_require_id(data),
            name=data.get("name") or data["id"],
            description=data.get("description", ""),
            components=tuple(CompositeInstance.from_dict(c) for c in data.get("components") or ()),
            data_schema=tuple(ComponentField.from_dict(f) for f in data.get("dataSchema") or ()),
            min_columns=int(data.get("minColumns", 1)),
            default_columns=int(data.get("defaultColumns", 12)),
            icon=data.get("icon"),
        )


ComponentDefinition = Union[PrimitiveComponent, CompositeComponent]


def _require_id(data: Mapping[str, Any]) -> str:
    component_id = data.get("id")
    if not isinstance(component_id, str) or not component_id:
        raise SectionFormatError("Component definition has no id")
    return component_id


def component_from_dict(data: Mapping[str, Any]) -> ComponentDefinition:
    """Decode a persisted component definition using its ``type`` field."""
    kind = data.get("type")
    if kind == "primitive":
        return PrimitiveComponent.from_dict(data)
    if kind == "composite":
        return CompositeComponent.from_dict(data)
    raise SectionFormatError(f"Unknown component type '{kind}'")
