from __future__ import annotations

"""Pure operations on section forests.

A forest is an ordered tuple of :class:`~pagecraft.core.models.Section`
trees: the top-level section list of a page, or any node's children. Every
function here returns a new forest and never mutates its input. Subtrees
that an operation does not touch are reused as-is, so callers may compare by
identity to detect a no-op.

Guarantees
----------
- After any operation, every sibling list it touched has contiguous,
  zero-based ``order`` values matching list positions.
- Unknown ids are not errors: lookups return ``None`` and mutations return
  the input forest unchanged.
- Ids are expected to be unique. If a corrupted document repeats an id, only
  the first match in depth-first pre-order (a node before its children,
  earlier siblings before later ones) is found, updated, moved or deleted.
"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Iterator, List, Literal, Optional, Sequence, Tuple

from pagecraft.core.models.sections import Section

__all__ = [
    "Forest",
    "SiblingInfo",
    "renumber",
    "iter_sections",
    "collect_ids",
    "find_by_id",
    "find_parent_id",
    "contains_id",
    "update_by_id",
    "delete_by_id",
    "move_sibling",
    "insert_at",
    "reorder_within_parent",
    "move_to_parent",
    "sibling_info",
    "children_of",
]

logger = logging.getLogger(__name__)

Forest = Tuple[Section, ...]
Direction = Literal["up", "down"]


@dataclass(frozen=True)
class SiblingInfo:
    """Position of a node within its own sibling list.

    ``parent_id`` is ``None`` for top-level sections.
    """

    is_first: bool
    is_last: bool
    parent_id: Optional[str]
    index: int
    sibling_count: int


# ---------------------------------------------------------------------------
# Read-only helpers
# ---------------------------------------------------------------------------

def renumber(siblings: Sequence[Section]) -> Forest:
    """Return *siblings* with ``order`` set to ``0..n-1``; unchanged nodes are reused."""
    return tuple(node.with_order(i) for i, node in enumerate(siblings))


def iter_sections(forest: Sequence[Section]) -> Iterator[Section]:
    """Yield every node in depth-first pre-order."""
    for node in forest:
        yield node
        yield from iter_sections(node.children)


def collect_ids(forest: Sequence[Section]) -> List[str]:
    return [node.id for node in iter_sections(forest)]


def find_by_id(forest: Sequence[Section], section_id: str) -> Optional[Section]:
    """Return the first node with *section_id* in pre-order, or ``None``."""
    for node in iter_sections(forest):
        if node.id == section_id:
            return node
    return None


def contains_id(node: Section, section_id: str) -> bool:
    """True if *section_id* is *node* itself or anywhere in its subtree."""
    return node.id == section_id or find_by_id(node.children, section_id) is not None


def _locate(forest: Sequence[Section], section_id: str,
            parent_id: Optional[str] = None) -> Optional[Tuple[Optional[str], int, Sequence[Section]]]:
    """Return ``(parent_id, index, siblings)`` of the first match, or ``None``."""
    for index, node in enumerate(forest):
        if node.id == section_id:
            return parent_id, index, forest
        found = _locate(node.children, section_id, node.id)
        if found is not None:
            return found
    return None


def find_parent_id(forest: Sequence[Section], section_id: str) -> Optional[str]:
    """Parent id of *section_id*; ``None`` for top-level nodes and unknown ids."""
    found = _locate(forest, section_id)
    return found[0] if found else None


def sibling_info(forest: Sequence[Section], section_id: str) -> Optional[SiblingInfo]:
    """Position of *section_id* among its siblings, or ``None`` if absent.

    Used to gate move-up/move-down affordances and to learn which sibling
    list an active node belongs to.
    """
    found = _locate(forest, section_id)
    if found is None:
        return None
    parent_id, index, siblings = found
    return SiblingInfo(
        is_first=index == 0,
        is_last=index == len(siblings) - 1,
        parent_id=parent_id,
        index=index,
        sibling_count=len(siblings),
    )


def children_of(forest: Sequence[Section], parent_id: Optional[str]) -> Optional[Forest]:
    """Sibling list addressed by *parent_id* (``None`` = top level)."""
    if parent_id is None:
        return tuple(forest)
    parent = find_by_id(forest, parent_id)
    return parent.children if parent is not None else None


# ---------------------------------------------------------------------------
# Structural rewrites
# ---------------------------------------------------------------------------

# Returned by sibling-list edits that leave the list as it was.
_UNCHANGED: Any = object()


def _rewrite_first(forest: Sequence[Section], section_id: str,
                   edit: Callable[[Sequence[Section], int], Forest]) -> Optional[Forest]:
    """Rewrite the sibling list holding the first match of *section_id*.

    *edit* receives that sibling list and the match index and returns the
    replacement list, or ``_UNCHANGED``. Returns the new forest,
    ``_UNCHANGED``, or ``None`` if nothing matched.
    """
    for index, node in enumerate(forest):
        if node.id == section_id:
            return edit(forest, index)
        new_children = _rewrite_first(node.children, section_id, edit)
        if new_children is _UNCHANGED:
            return _UNCHANGED
        if new_children is not None:
            new_forest = list(forest)
            new_forest[index] = node.with_children(new_children)
            return tuple(new_forest)
    return None


def _rewrite_children(forest: Sequence[Section], parent_id: Optional[str],
                      edit: Callable[[Forest], Forest]) -> Optional[Forest]:
    """Apply *edit* to the children of *parent_id* (or to the top level)."""
    if parent_id is None:
        return edit(tuple(forest))

    def _edit_parent(siblings: Sequence[Section], index: int) -> Forest:
        parent = siblings[index]
        new_children = edit(parent.children)
        if new_children is _UNCHANGED:
            return _UNCHANGED
        new_siblings = list(siblings)
        new_siblings[index] = parent.with_children(new_children)
        return tuple(new_siblings)

    return _rewrite_first(forest, parent_id, _edit_parent)


def _settle(forest: Sequence[Section], rewritten: Optional[Forest]) -> Forest:
    if rewritten is None or rewritten is _UNCHANGED:
        return tuple(forest)
    return rewritten


def update_by_id(forest: Sequence[Section], section_id: str, new_node: Section) -> Forest:
    """Replace the node *section_id* with *new_node*, keeping its position.

    The replacement's ``order`` is forced to the slot it occupies. Its
    ``children`` are taken from *new_node* as given.
    """
    def _replace(siblings: Sequence[Section], index: int) -> Forest:
        new_siblings = list(siblings)
        new_siblings[index] = new_node.with_order(index)
        return tuple(new_siblings)

    result = _rewrite_first(forest, section_id, _replace)
    if result is None:
        logger.debug("Tree: update_by_id id_not_found id=%s", section_id)
    return _settle(forest, result)


def delete_by_id(forest: Sequence[Section], section_id: str) -> Forest:
    """Remove node *section_id* and its entire subtree; renumber survivors."""
    def _delete(siblings: Sequence[Section], index: int) -> Forest:
        return renumber(tuple(siblings[:index]) + tuple(siblings[index + 1:]))

    result = _rewrite_first(forest, section_id, _delete)
    if result is None:
        logger.debug("Tree: delete_by_id id_not_found id=%s", section_id)
    return _settle(forest, result)


def move_sibling(forest: Sequence[Section], section_id: str, direction: Direction) -> Forest:
    """Swap node *section_id* with its previous (``up``) or next (``down``) sibling.

    Moving the first node up or the last node down returns the forest
    unchanged. Only the affected sibling list is renumbered.
    """
    if direction not in ("up", "down"):
        raise ValueError(f"Unsupported move direction '{direction}'")

    def _swap(siblings: Sequence[Section], index: int) -> Forest:
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(siblings):
            return _UNCHANGED
        new_siblings = list(siblings)
        new_siblings[index], new_siblings[target] = new_siblings[target], new_siblings[index]
        return renumber(new_siblings)

    return _settle(forest, _rewrite_first(forest, section_id, _swap))


def insert_at(forest: Sequence[Section], parent_id: Optional[str], new_node: Section,
              index: Optional[int] = None) -> Forest:
    """Insert *new_node* into the children of *parent_id* (top level when ``None``).

    Appends when *index* is omitted; an out-of-range index is clamped to the
    list bounds. A parent without children gets a new list. Unknown parents
    leave the forest unchanged.
    """
    def _insert(siblings: Forest) -> Forest:
        position = len(siblings) if index is None else max(0, min(index, len(siblings)))
        return renumber(siblings[:position] + (new_node,) + siblings[position:])

    result = _rewrite_children(forest, parent_id, _insert)
    if result is None:
        logger.debug("Tree: insert_at parent_not_found parent=%s", parent_id)
    return _settle(forest, result)


def reorder_within_parent(forest: Sequence[Section], parent_id: Optional[str],
                          from_index: int, to_index: int) -> Forest:
    """Move the child at *from_index* to the gap *to_index* of the same list.

    *to_index* addresses a gap in the list as it was before the move
    (``0..len``). Removing the element first shifts every later index down by
    one, so the insertion point is ``to_index - 1`` when moving forward and
    ``to_index`` otherwise.
    """
    def _reorder(siblings: Forest) -> Forest:
        if not 0 <= from_index < len(siblings):
            return _UNCHANGED
        gap = max(0, min(to_index, len(siblings)))
        position = gap - 1 if from_index < gap else gap
        if position == from_index:
            return _UNCHANGED
        items = list(siblings)
        moved = items.pop(from_index)
        items.insert(position, moved)
        return renumber(items)

    return _settle(forest, _rewrite_children(forest, parent_id, _reorder))


def move_to_parent(forest: Sequence[Section], section_id: str,
                   new_parent_id: Optional[str], index: Optional[int] = None) -> Forest:
    """Re-parent *section_id* under *new_parent_id* at *index* (append if omitted).

    The moved node keeps its own children. Moving a node into itself or into
    one of its descendants, or to an unknown parent, is a no-op. *index*
    addresses the target list after the node has been detached.
    """
    node = find_by_id(forest, section_id)
    if node is None:
        return tuple(forest)
    if new_parent_id is not None:
        if contains_id(node, new_parent_id):
            logger.debug("Tree: move_to_parent cycle id=%s parent=%s", section_id, new_parent_id)
            return tuple(forest)
        if find_by_id(forest, new_parent_id) is None:
            return tuple(forest)
    detached = delete_by_id(forest, section_id)
    return insert_at(detached, new_parent_id, node, index)
