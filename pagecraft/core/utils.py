from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no UI or disk I/O; they can be
used across all layers of the toolkit.
"""

from datetime import datetime, timezone
import random
import re
import string
import time

__all__ = [
    "slugify",
    "generate_section_id",
    "utc_now_iso",
    "epoch_millis",
]

_BASE36 = string.digits + string.ascii_lowercase

_NON_SLUG_RUN = re.compile(r"[^a-z0-9-]+")
_HYPHEN_RUN = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Return the URL slug for a page *text* (usually its title).

    Lower-cases, collapses every run of characters outside ``[a-z0-9-]`` into
    a single hyphen, squeezes repeated hyphens and trims hyphens at both ends.

    Examples:
        >>> slugify("  Our Teams & Events!!  ")
        'our-teams-events'
        >>> slugify("Already-a-slug")
        'already-a-slug'
    """
    if not text:
        return ""
    slug = _NON_SLUG_RUN.sub("-", text.lower())
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def generate_section_id() -> str:
    """Generate a section id of the form ``section-<epoch ms>-<9 base36 chars>``."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"section-{epoch_millis()}-{suffix}"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
