"""Configuration files (YAML) and the helpers that load them.

``ConfigManager`` reads the default files shipped in this folder and merges
them with user overrides.
"""

from .manager import ConfigManager

__all__ = [
    "ConfigManager",
]
