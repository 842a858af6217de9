"""Top-level package for the PageCraft page composition core.

The package is GUI-agnostic. Editing front-ends should depend on the public
API exposed here and in :mod:`pagecraft.core.services` rather than importing
internal modules directly.
"""

from .core.models import Page, Section  # re-export for convenience

__all__: list[str] = [
    "Page",
    "Section",
]

__version__ = "0.1.0"
