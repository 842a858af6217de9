from __future__ import annotations

"""``{{fieldName}}`` placeholder substitution for composite component props."""

import re
from typing import Any, Dict, Mapping

__all__ = ["resolve_template", "resolve_props"]

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def resolve_template(template: Any, data: Mapping[str, Any]) -> Any:
    """Substitute every ``{{name}}`` in *template* with ``data[name]``.

    Placeholders whose field is missing or ``None`` are left verbatim so the
    preview shows what is still unbound. Non-string templates are returned
    unchanged.

    Examples:
        >>> resolve_template("Hello {{name}}", {"name": "Ada"})
        'Hello Ada'
        >>> resolve_template("{{missing}} here", {})
        '{{missing}} here'
    """
    if not isinstance(template, str):
        return template

    def _substitute(match: "re.Match[str]") -> str:
        value = data.get(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return _PLACEHOLDER.sub(_substitute, template)


def resolve_props(props: Mapping[str, Any], data: Mapping[str, Any]) -> Dict[str, Any]:
    """Resolve every prop value of a composite's primitive instance."""
    return {key: resolve_template(value, data) for key, value in props.items()}
