from __future__ import annotations

"""Draft/publish lifecycle of the page being edited.

States
------
``new``
    No persisted content yet. The slug follows the title.
``loading``
    A load is in progress.
``ready``
    Content is loaded; :attr:`PageLifecycle.is_dirty` tells whether there
    are unsaved edits.
``draft_saved``
    The current content was explicitly saved as a local draft.
``published``
    The current content was written to the document store. Any further
    edit re-enters ``ready`` with the dirty flag set.

Every edit marks the page dirty and (re)arms a debounced autosave that
writes a local draft. Loading prefers a local draft over the stored page and
counts it as unsaved work. Publishing validates, writes the page, then
discards the draft.

Persistence failures never raise out of this module: they come back as
unsuccessful :class:`OperationResult` objects with ``retryable`` in their
details, and the lifecycle stays in its pre-attempt state.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
import json
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from pagecraft.core.debounce import Debouncer, TimerFactory
from pagecraft.core.exceptions import DocumentNotFoundError, SectionFormatError, StorageError
from pagecraft.core.models.page import Layout, Page, PageStatus
from pagecraft.core.models.sections import Section
from pagecraft.core.models.settings import EditorSettings
from pagecraft.core.services.section_editing_service import OperationResult
from pagecraft.core.storage.documents import DocumentStore, load_required
from pagecraft.core.storage.drafts import DraftStore
from pagecraft.core.utils import slugify, utc_now_iso

__all__ = ["LifecycleState", "ValidationResult", "PageLifecycle", "serialize_page", "parse_page"]

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({"meta_description", "is_landing_page", "layout_id", "use_layout"})


class LifecycleState(str, Enum):
    new = "new"
    loading = "loading"
    ready = "ready"
    draft_saved = "draft_saved"
    published = "published"


@dataclass(frozen=True)
class ValidationResult:
    """Field name to message map; empty when the page may be published."""

    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def serialize_page(page: Page) -> str:
    return json.dumps(page.to_dict(), indent=2, ensure_ascii=False) + "\n"


def parse_page(text: str) -> Page:
    """Decode a stored page document; raises :class:`SectionFormatError`."""
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise SectionFormatError(f"Page document is not valid JSON: {exc}", cause=exc) from exc
    return Page.from_dict(data)


def _persistence_failure(action: str, exc: StorageError) -> OperationResult:
    return OperationResult(
        False,
        f"Could not {action}: {exc}",
        {"retryable": exc.retryable, "path": exc.path},
    )


class PageLifecycle:
    """Editing session for one page.

    Parameters
    ----------
    store
        Published document store.
    drafts
        Local draft store.
    settings
        Editor settings; read from :class:`~pagecraft.config.ConfigManager`
        when omitted.
    timer_factory
        Factory for the autosave timer, ``threading.Timer`` by default. A
        UI should pass one that schedules on its event loop. With the
        default, an autosave already running when ``publish``, ``save_draft``
        or ``close`` cancels it is waited for, so its draft is written before
        the cancelling call continues.
    layouts
        Layouts available to new pages; the first one is preselected.
    """

    def __init__(
        self,
        store: DocumentStore,
        drafts: DraftStore,
        settings: Optional[EditorSettings] = None,
        timer_factory: Optional[TimerFactory] = None,
        layouts: Optional[Sequence[Layout]] = None,
        on_change: Optional[Callable[["PageLifecycle"], None]] = None,
    ) -> None:
        if settings is None:
            from pagecraft.config import ConfigManager

            settings = ConfigManager().get_editor_settings()
        self._store = store
        self._drafts = drafts
        self._settings = settings
        self._layouts = list(layouts or ())
        self._on_change = on_change
        self._autosave = Debouncer(settings.autosave_delay_seconds, self._autosave_now, timer_factory)

        self._state = LifecycleState.new
        self._page = self._blank_page()
        self._dirty = False
        self._slug_locked = False
        self._errors: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def page(self) -> Page:
        return self._page

    @property
    def sections(self) -> Sequence[Section]:
        return self._page.sections

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def slug_locked(self) -> bool:
        return self._slug_locked

    @property
    def errors(self) -> Dict[str, str]:
        """Validation errors from the last publish attempt."""
        return dict(self._errors)

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    def _page_path(self, slug: str) -> str:
        return self._settings.content_paths.page_path(slug)

    def _blank_page(self) -> Page:
        layout_id = self._layouts[0].id if self._layouts else None
        return Page(layout_id=layout_id, use_layout=True)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    def start_new(self, layouts: Optional[Iterable[Layout]] = None) -> None:
        """Reset to an empty, unsaved page."""
        self._autosave.cancel()
        if layouts is not None:
            self._layouts = list(layouts)
        self._page = self._blank_page()
        self._state = LifecycleState.new
        self._dirty = False
        self._slug_locked = False
        self._errors = {}
        self._notify()

    def load(self, slug: str) -> OperationResult:
        """Open *slug*, preferring a local draft over the stored page."""
        logger.info("Page: load slug=%s", slug)
        self._autosave.cancel()
        self._state = LifecycleState.loading
        self._errors = {}

        draft = self._drafts.load(slug)
        if draft is not None:
            self._page = replace(draft.content, slug=slug)
            self._enter_ready(dirty=True)
            logger.info("Page: loaded local draft slug=%s saved_at=%d", slug, draft.metadata.timestamp)
            return OperationResult(True, "Loaded local draft.", {"source": "draft", "timestamp": draft.metadata.timestamp})

        try:
            text = load_required(self._store, self._page_path(slug))
        except DocumentNotFoundError:
            logger.warning("Page: not found slug=%s", slug)
            self._state = LifecycleState.new
            return OperationResult(False, f"Page '{slug}' not found.", {"retryable": False, "slug": slug})
        except StorageError as exc:
            logger.error("I/O FAIL: load page slug=%s: %s", slug, exc)
            self._state = LifecycleState.new
            return _persistence_failure("load page", exc)
        try:
            page = parse_page(text)
        except SectionFormatError as exc:
            logger.error("Page: unreadable document slug=%s: %s", slug, exc)
            self._state = LifecycleState.new
            return OperationResult(False, f"Page '{slug}' could not be read: {exc}", {"retryable": False, "slug": slug})

        self._page = replace(page, slug=slug)
        self._enter_ready(dirty=False)
        return OperationResult(True, "Loaded page.", {"source": "store"})

    def _enter_ready(self, dirty: bool) -> None:
        self._state = LifecycleState.ready
        self._dirty = dirty
        self._slug_locked = True
        self._notify()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _mark_dirty(self) -> None:
        self._dirty = True
        if self._state in (LifecycleState.draft_saved, LifecycleState.published):
            self._state = LifecycleState.ready
        if self._page.slug:
            self._autosave.call()
        self._notify()

    def set_title(self, title: str) -> None:
        page = replace(self._page, title=title)
        if not self._slug_locked:
            page = replace(page, slug=slugify(title))
        self._page = page
        self._mark_dirty()

    def set_slug(self, slug: str) -> OperationResult:
        """Set the slug of a new page; typed input goes through :func:`slugify`."""
        if self._slug_locked:
            logger.info("Edit noop: set_slug locked slug=%s", self._page.slug)
            return OperationResult(False, "Slug cannot be changed after the page has been saved.", {"slug": self._page.slug})
        slug = slugify(slug)
        self._page = replace(self._page, slug=slug)
        self._mark_dirty()
        return OperationResult(True, "Slug updated.", {"slug": slug})

    def update_fields(self, **changes: Any) -> OperationResult:
        """Edit page metadata (description, landing flag, layout)."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            return OperationResult(False, "Unsupported page fields.", {"fields": sorted(unknown)})
        if not changes:
            return OperationResult(False, "No changes.")
        self._page = replace(self._page, **changes)
        self._mark_dirty()
        return OperationResult(True, "Page updated.")

    def replace_sections(self, forest: Sequence[Section]) -> None:
        """Adopt *forest* as the page's sections; no-op if identical."""
        forest = tuple(forest)
        if forest == self._page.sections:
            return
        self._page = self._page.with_sections(forest)
        self._mark_dirty()

    def mutate_sections(self, edit: Callable[[Sequence[Section]], Any]) -> Any:
        """Run *edit* on the current sections and adopt its forest on success.

        *edit* returns a forest, or a result object with ``success`` and
        ``forest`` attributes (such as an ``EditResult``). The edit's return
        value is passed through.
        """
        result = edit(self._page.sections)
        if hasattr(result, "forest"):
            if getattr(result, "success", False):
                self.replace_sections(result.forest)
        else:
            self.replace_sections(result)
        return result

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        """Check the page can be published.

        Raises :class:`StorageError` if the landing-page check cannot read
        the store.
        """
        errors: Dict[str, str] = {}
        if not self._page.title.strip():
            errors["title"] = "Title is required"
        if not self._page.slug.strip():
            errors["slug"] = "Slug is required"
        if self._page.is_landing_page:
            other = self._find_other_landing_page()
            if other is not None:
                errors["isLandingPage"] = (
                    f"Another page ({other.title or other.slug}) is already set as the landing page"
                )
        return ValidationResult(errors)

    def _find_other_landing_page(self) -> Optional[Page]:
        own_path = self._page_path(self._page.slug) if self._page.slug else None
        for path in self._store.list_paths(self._settings.content_paths.pages):
            if path == own_path:
                continue
            text = self._store.load(path)
            if text is None:
                continue
            try:
                other = parse_page(text)
            except SectionFormatError as exc:
                logger.warning("Page: skipping unreadable page %s during landing check: %s", path, exc)
                continue
            if other.is_landing_page and other.slug != self._page.slug:
                return other
        return None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _autosave_now(self) -> None:
        page = self._page
        if not page.slug:
            return
        if self._drafts.save(page.slug, page):
            logger.debug("Page: autosaved draft slug=%s", page.slug)
        else:
            logger.warning("Page: autosave failed slug=%s", page.slug)

    def flush_autosave(self) -> bool:
        """Write a pending autosave immediately."""
        return self._autosave.flush()

    def save_draft(self) -> OperationResult:
        """Explicitly save the current content as a local draft."""
        slug = self._page.slug
        if not slug:
            return OperationResult(False, "A slug is required to save a draft.", {"errors": {"slug": "Slug is required"}})
        self._autosave.cancel()
        if not self._drafts.save(slug, self._page):
            return OperationResult(False, "Could not save the local draft.", {"retryable": True, "slug": slug})
        self._state = LifecycleState.draft_saved
        self._dirty = False
        self._slug_locked = True
        logger.info("Page: draft saved slug=%s", slug)
        self._notify()
        return OperationResult(True, "Draft saved.", {"slug": slug})

    def publish(self) -> OperationResult:
        """Validate and write the page to the document store as published."""
        logger.info("Page: publish slug=%s", self._page.slug)
        try:
            validation = self.validate()
        except StorageError as exc:
            logger.error("I/O FAIL: landing page check: %s", exc)
            return _persistence_failure("check existing pages", exc)
        self._errors = dict(validation.errors)
        if not validation.is_valid:
            logger.info("Page: publish blocked errors=%s", sorted(validation.errors))
            self._notify()
            return OperationResult(False, "Please fix the highlighted fields.", {"errors": dict(validation.errors)})

        now = utc_now_iso()
        page = replace(
            self._page,
            status=PageStatus.published,
            created_at=self._page.created_at or now,
            updated_at=now,
        )
        path = self._page_path(page.slug)
        message = f"Update page: {page.title or page.slug}"
        try:
            self._store.save(path, serialize_page(page), message)
        except StorageError as exc:
            logger.error("I/O FAIL: publish slug=%s: %s", page.slug, exc)
            return _persistence_failure("publish page", exc)

        self._autosave.cancel()
        self._drafts.delete(page.slug)
        self._page = page
        self._dirty = False
        self._slug_locked = True
        self._state = LifecycleState.published
        logger.info("Page: published slug=%s", page.slug)
        self._notify()
        return OperationResult(True, "Page published.", {"slug": page.slug, "path": path})

    def discard_draft(self) -> OperationResult:
        """Drop the local draft and reload the stored page."""
        slug = self._page.slug
        if not slug:
            return OperationResult(False, "No page is open.")
        self._autosave.cancel()
        self._drafts.delete(slug)
        return self.load(slug)

    def delete_page(self) -> OperationResult:
        """Delete the stored document and the local draft, then start a new page."""
        slug = self._page.slug
        if not slug:
            return OperationResult(False, "No page is open.")
        try:
            self._store.delete(self._page_path(slug), f"Delete page: {self._page.title or slug}")
        except StorageError as exc:
            logger.error("I/O FAIL: delete slug=%s: %s", slug, exc)
            return _persistence_failure("delete page", exc)
        self._drafts.delete(slug)
        logger.info("Page: deleted slug=%s", slug)
        self.start_new()
        return OperationResult(True, "Page deleted.", {"slug": slug})

    def close(self) -> None:
        """Leave the editor; a pending autosave is dropped."""
        self._autosave.cancel()
