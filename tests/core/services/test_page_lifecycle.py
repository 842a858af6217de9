import json
import threading
from unittest.mock import Mock

import pytest

from pagecraft.core.exceptions import StorageError
from pagecraft.core.models import Layout, Page, PageStatus, TextSection
from pagecraft.core.services.page_lifecycle import LifecycleState, PageLifecycle
from pagecraft.core.services.section_editing_service import SectionEditingService
from pagecraft.core.storage import InMemoryDraftStore


@pytest.fixture
def lifecycle(document_store, draft_store, settings, timer_factory):
    return PageLifecycle(document_store, draft_store, settings=settings, timer_factory=timer_factory)


def stored(document_store, slug):
    return json.loads(document_store.load(f"src/content/pages/{slug}.json"))


class TestNewPage:
    def test_starts_new_and_clean(self, lifecycle):
        assert lifecycle.state is LifecycleState.new
        assert not lifecycle.is_dirty
        assert not lifecycle.slug_locked

    def test_slug_follows_title_while_new(self, lifecycle):
        lifecycle.set_title("  Our Teams & Events!!  ")
        assert lifecycle.page.slug == "our-teams-events"
        assert lifecycle.is_dirty
        lifecycle.set_title("Our Teams")
        assert lifecycle.page.slug == "our-teams"

    def test_first_layout_is_preselected(self, document_store, draft_store, settings, timer_factory):
        layouts = [Layout(id="main", name="Main"), Layout(id="alt", name="Alt")]
        lifecycle = PageLifecycle(document_store, draft_store, settings=settings,
                                  timer_factory=timer_factory, layouts=layouts)
        assert lifecycle.page.layout_id == "main"
        assert lifecycle.page.use_layout is True

    def test_no_autosave_without_slug(self, lifecycle, timer_factory):
        lifecycle.update_fields(meta_description="x")
        assert timer_factory.timers == []

    def test_typed_slug_is_normalised(self, lifecycle, document_store):
        lifecycle.set_title("About")
        result = lifecycle.set_slug("About Us/../x")
        assert result.success
        assert lifecycle.page.slug == "about-us-x"
        assert result.details["slug"] == "about-us-x"

        assert lifecycle.publish().success
        assert document_store.load("src/content/pages/about-us-x.json") is not None


class TestLoad:
    def test_load_from_store_is_clean_and_locks_slug(self, lifecycle, seed_page):
        seed_page(Page(slug="about", title="About"))
        result = lifecycle.load("about")

        assert result.success and result.details["source"] == "store"
        assert lifecycle.state is LifecycleState.ready
        assert not lifecycle.is_dirty
        assert lifecycle.slug_locked
        lifecycle.set_title("About the team")
        assert lifecycle.page.slug == "about"
        assert not lifecycle.set_slug("team").success

    def test_draft_takes_precedence_and_is_dirty(self, lifecycle, seed_page, draft_store):
        seed_page(Page(slug="about", title="About"))
        draft_store.save("about", Page(slug="about", title="About Us (draft)"))

        result = lifecycle.load("about")
        assert result.details["source"] == "draft"
        assert lifecycle.page.title == "About Us (draft)"
        assert lifecycle.is_dirty
        assert lifecycle.state is LifecycleState.ready

    def test_missing_page(self, lifecycle):
        result = lifecycle.load("nope")
        assert not result.success
        assert result.details["retryable"] is False
        assert lifecycle.state is LifecycleState.new

    def test_store_failure_is_retryable(self, draft_store, settings, timer_factory):
        store = Mock()
        store.load.side_effect = StorageError("timeout", path="src/content/pages/a.json")
        lifecycle = PageLifecycle(store, draft_store, settings=settings, timer_factory=timer_factory)
        result = lifecycle.load("a")
        assert not result.success
        assert result.details["retryable"] is True
        assert lifecycle.state is LifecycleState.new

    def test_unreadable_document(self, lifecycle, document_store):
        document_store.save("src/content/pages/bad.json", "{broken", "seed")
        assert not lifecycle.load("bad").success

    def test_corrupt_draft_falls_back_to_store(self, lifecycle, seed_page, draft_store):
        seed_page(Page(slug="about", title="About"))
        draft_store.entries["about"] = json.dumps({
            "metadata": {"slug": "about", "timestamp": 1, "version": 1},
            "content": {"slug": "about", "title": "Draft", "sections": [{"id": "t", "type": "text", "order": "x"}]},
        })
        result = lifecycle.load("about")
        assert result.success
        assert result.details["source"] == "store"
        assert not lifecycle.is_dirty

    def test_corrupt_stored_sections_are_reported(self, lifecycle, document_store):
        document_store.save("src/content/pages/bad.json", json.dumps({
            "slug": "bad",
            "title": "Bad",
            "sections": [{"id": "c", "type": "component", "componentId": "heading", "data": [1, 2]}],
        }), "seed")
        result = lifecycle.load("bad")
        assert not result.success
        assert result.details["retryable"] is False
        assert lifecycle.state is LifecycleState.new


class TestAutosave:
    def test_edits_reset_the_debounce(self, lifecycle, seed_page, timer_factory, draft_store):
        seed_page(Page(slug="about", title="About"))
        lifecycle.load("about")

        lifecycle.set_title("A")
        lifecycle.set_title("AB")
        lifecycle.update_fields(meta_description="desc")
        assert len(timer_factory.active()) == 1
        assert timer_factory.last.delay == 3.0
        assert not draft_store.has_draft("about")

        timer_factory.last.fire()
        draft = draft_store.load("about")
        assert draft.content.title == "AB"
        assert draft.content.meta_description == "desc"
        assert lifecycle.is_dirty

    def test_close_cancels_pending_autosave(self, lifecycle, seed_page, timer_factory, draft_store):
        seed_page(Page(slug="about", title="About"))
        lifecycle.load("about")
        lifecycle.set_title("Changed")
        lifecycle.close()
        assert timer_factory.active() == []
        assert not lifecycle.autosave_pending

    def test_section_mutations_mark_dirty(self, lifecycle, seed_page):
        seed_page(Page(slug="about", title="About"))
        lifecycle.load("about")
        service = SectionEditingService()

        result = lifecycle.mutate_sections(lambda f: service.add_section(f, "text"))
        assert result.success
        assert len(lifecycle.sections) == 1
        assert lifecycle.is_dirty

    def test_failed_edit_does_not_mark_dirty(self, lifecycle, seed_page):
        seed_page(Page(slug="about", title="About"))
        lifecycle.load("about")
        service = SectionEditingService()

        result = lifecycle.mutate_sections(lambda f: service.delete_section(f, "ghost"))
        assert not result.success
        assert not lifecycle.is_dirty

    def test_flush_autosave(self, lifecycle, seed_page, draft_store):
        seed_page(Page(slug="about", title="About"))
        lifecycle.load("about")
        lifecycle.set_title("Now")
        assert lifecycle.flush_autosave()
        assert draft_store.load("about").content.title == "Now"


class TestSaveDraft:
    def test_save_draft(self, lifecycle, draft_store):
        lifecycle.set_title("Contact")
        result = lifecycle.save_draft()
        assert result.success
        assert lifecycle.state is LifecycleState.draft_saved
        assert not lifecycle.is_dirty
        assert lifecycle.slug_locked
        assert draft_store.has_draft("contact")

        lifecycle.update_fields(meta_description="changed")
        assert lifecycle.state is LifecycleState.ready
        assert lifecycle.is_dirty

    def test_save_draft_requires_slug(self, lifecycle):
        assert not lifecycle.save_draft().success

    def test_save_draft_failure(self, document_store, settings, timer_factory):
        drafts = Mock()
        drafts.save.return_value = False
        lifecycle = PageLifecycle(document_store, drafts, settings=settings, timer_factory=timer_factory)
        lifecycle.set_title("X")
        result = lifecycle.save_draft()
        assert not result.success and result.details["retryable"]
        assert lifecycle.is_dirty


class TestPublish:
    def test_publish_writes_and_discards_draft(self, lifecycle, document_store, draft_store):
        lifecycle.set_title("About Us")
        lifecycle.mutate_sections(lambda f: (TextSection(id="t", content="Hello"),))
        lifecycle.save_draft()

        result = lifecycle.publish()
        assert result.success
        assert lifecycle.state is LifecycleState.published
        assert not lifecycle.is_dirty
        assert not draft_store.has_draft("about-us")

        doc = stored(document_store, "about-us")
        assert doc["status"] == "published"
        assert doc["sections"][0]["content"] == "Hello"
        assert doc["updatedAt"]
        assert document_store.commits[-1].message == "Update page: About Us"

    def test_edit_after_publish_reenters_dirty(self, lifecycle):
        lifecycle.set_title("About")
        lifecycle.publish()
        lifecycle.update_fields(meta_description="later")
        assert lifecycle.state is LifecycleState.ready
        assert lifecycle.is_dirty
        assert lifecycle.page.status is PageStatus.published

    def test_publish_cancels_pending_autosave(self, lifecycle, timer_factory, draft_store):
        lifecycle.set_title("About")
        assert timer_factory.active()
        lifecycle.publish()
        assert timer_factory.active() == []
        assert not draft_store.has_draft("about")

    def test_publish_waits_for_autosave_already_running(self, document_store, settings, timer_factory):
        entered = threading.Event()
        release = threading.Event()

        class SlowDraftStore(InMemoryDraftStore):
            def save(self, slug, page):
                entered.set()
                release.wait(5)
                return super().save(slug, page)

        drafts = SlowDraftStore()
        lifecycle = PageLifecycle(document_store, drafts, settings=settings, timer_factory=timer_factory)
        lifecycle.set_title("About")

        autosave = threading.Thread(target=timer_factory.last.fire)
        autosave.start()
        assert entered.wait(5)

        results = []
        publisher = threading.Thread(target=lambda: results.append(lifecycle.publish()))
        publisher.start()
        publisher.join(0.2)
        assert publisher.is_alive()

        release.set()
        autosave.join(5)
        publisher.join(5)
        assert results[0].success
        assert not drafts.has_draft("about")

    def test_validation_errors_block_publish(self, lifecycle, document_store):
        result = lifecycle.publish()
        assert not result.success
        assert result.details["errors"] == {"title": "Title is required", "slug": "Slug is required"}
        assert lifecycle.errors == result.details["errors"]
        assert document_store.commits == []

    def test_second_landing_page_is_rejected_without_write(self, lifecycle, seed_page, document_store):
        seed_page(Page(slug="home", title="Home", is_landing_page=True))
        lifecycle.set_title("Welcome")
        lifecycle.update_fields(is_landing_page=True)

        result = lifecycle.publish()
        assert not result.success
        assert result.details["errors"] == {
            "isLandingPage": "Another page (Home) is already set as the landing page",
        }
        assert document_store.commits == []
        assert lifecycle.is_dirty

    def test_landing_page_can_be_republished(self, lifecycle, seed_page):
        seed_page(Page(slug="home", title="Home", is_landing_page=True))
        lifecycle.load("home")
        lifecycle.set_title("Home sweet home")
        assert lifecycle.publish().success

    def test_store_failure_keeps_state(self, draft_store, settings, timer_factory):
        store = Mock()
        store.list_paths.return_value = []
        store.save.side_effect = StorageError("rate limited", path="src/content/pages/about.json")
        lifecycle = PageLifecycle(store, draft_store, settings=settings, timer_factory=timer_factory)
        lifecycle.set_title("About")
        lifecycle.save_draft()
        lifecycle.update_fields(meta_description="x")

        result = lifecycle.publish()
        assert not result.success
        assert result.details["retryable"] is True
        assert lifecycle.state is LifecycleState.ready
        assert lifecycle.is_dirty
        assert draft_store.has_draft("about")
        assert lifecycle.page.status is PageStatus.draft

    def test_landing_check_failure_is_persistence_error(self, draft_store, settings, timer_factory):
        store = Mock()
        store.list_paths.side_effect = StorageError("offline")
        lifecycle = PageLifecycle(store, draft_store, settings=settings, timer_factory=timer_factory)
        lifecycle.set_title("Home")
        lifecycle.update_fields(is_landing_page=True)
        result = lifecycle.publish()
        assert not result.success and result.details["retryable"]
        store.save.assert_not_called()


class TestDelete:
    def test_delete_page_removes_document_and_draft(self, lifecycle, seed_page, document_store, draft_store):
        seed_page(Page(slug="about", title="About"))
        lifecycle.load("about")
        draft_store.save("about", lifecycle.page)

        result = lifecycle.delete_page()
        assert result.success
        assert document_store.load("src/content/pages/about.json") is None
        assert not draft_store.has_draft("about")
        assert lifecycle.state is LifecycleState.new

    def test_discard_draft_reloads_store_copy(self, lifecycle, seed_page, draft_store):
        seed_page(Page(slug="about", title="About"))
        draft_store.save("about", Page(slug="about", title="Draft title"))
        lifecycle.load("about")

        result = lifecycle.discard_draft()
        assert result.success
        assert lifecycle.page.title == "About"
        assert not lifecycle.is_dirty


def test_on_change_callback(document_store, draft_store, settings, timer_factory):
    seen = []
    lifecycle = PageLifecycle(document_store, draft_store, settings=settings,
                              timer_factory=timer_factory, on_change=lambda lc: seen.append(lc.state))
    lifecycle.set_title("Hi")
    assert seen == [LifecycleState.new]
