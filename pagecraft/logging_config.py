from __future__ import annotations

"""Central logging configuration for PageCraft.

Import and call :func:`setup_logging` at application start-up.

Environment variables
---------------------
``PAGECRAFT_LOG_DIR``
    Directory of ``app.log`` (default ``logs``).
``PAGECRAFT_LOG_LEVEL``
    Console level used when the YAML configuration cannot be applied.
``PAGECRAFT_DEBUG_TREE``
    Truthy to log tree edits and drag-and-drop at DEBUG.
``PAGECRAFT_DEBUG_MODULES``
    Comma-separated logger names to log at DEBUG.
"""

import logging
import logging.config
import os
from typing import Any, Dict, List

from pagecraft.config import ConfigManager

__all__ = ["setup_logging"]

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TREE_LOGGERS = (
    "pagecraft.core.services.section_editing_service",
    "pagecraft.core.services.drag_drop",
    "pagecraft.core.tree",
)

# Loggers whose INFO records (edits, publishes, I/O) are kept in fallback mode.
_FALLBACK_INFO_LOGGERS = (
    "pagecraft.core.services",
    "pagecraft.core.storage",
)

_TRUTHY = {"1", "true", "yes", "on"}


def setup_logging() -> None:
    """Configure logging from ``logging.yml``, or a console/file fallback."""
    log_dir = os.environ.get("PAGECRAFT_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    try:
        logging_config = ConfigManager().get_logging_config()
        if isinstance(logging_config, dict) and logging_config.get("version"):
            handlers = logging_config.get("handlers") or {}
            if "file" in handlers:
                handlers["file"]["filename"] = log_file
            logging.config.dictConfig(logging_config)
            logging.getLogger(__name__).info("Logging configured from logging.yml, file=%s", log_file)
        else:
            _setup_fallback_logging(log_file, "no logging configuration found")
    except (ValueError, TypeError, AttributeError, ImportError) as exc:
        # dictConfig reports every configuration problem through these
        _setup_fallback_logging(log_file, str(exc))

    _apply_debug_overrides()


def _fallback_config(log_file: str) -> Dict[str, Any]:
    console_level = os.environ.get("PAGECRAFT_LOG_LEVEL", "").strip().upper()
    # getLevelName maps a known name to its number and anything else to a string
    if not isinstance(logging.getLevelName(console_level), int):
        console_level = "INFO"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"simple": {"format": _FORMAT}},
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "simple", "level": console_level},
            "file": {
                "class": "logging.FileHandler",
                "formatter": "simple",
                "level": "DEBUG",
                "filename": log_file,
                "encoding": "utf-8",
            },
        },
        "loggers": {name: {"level": "INFO"} for name in _FALLBACK_INFO_LOGGERS},
        "root": {"level": "WARNING", "handlers": ["console", "file"]},
    }


def _setup_fallback_logging(log_file: str, reason: str) -> None:
    """Console plus plain file logging when ``logging.yml`` is unusable."""
    logging.config.dictConfig(_fallback_config(log_file))
    logging.getLogger(__name__).error("Logging fell back to built-in configuration: %s", reason)


def _debug_targets() -> List[str]:
    targets: List[str] = []
    if os.environ.get("PAGECRAFT_DEBUG_TREE", "").strip().lower() in _TRUTHY:
        targets.extend(_TREE_LOGGERS)
    extra = os.environ.get("PAGECRAFT_DEBUG_MODULES", "")
    targets.extend(name.strip() for name in extra.split(",") if name.strip())
    return targets


def _apply_debug_overrides() -> None:
    """Lower the listed loggers to DEBUG, adding a DEBUG console handler if none emits it."""
    for name in _debug_targets():
        target = logging.getLogger(name)
        target.setLevel(logging.DEBUG)
        if not any(h.level <= logging.DEBUG for h in target.handlers):
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(_FORMAT))
            target.addHandler(handler)
        target.info("Debug override active for logger '%s'", name)
