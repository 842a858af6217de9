import pytest

from pagecraft.core.models import ComponentSection, Page, TextSection
from pagecraft.core.services.component_resolution import ComponentResolver
from pagecraft.core.services.page_lifecycle import PageLifecycle
from pagecraft.ui.controllers.page_editor_controller import PageEditorController


# ---------------------------
# Fixtures
# ---------------------------

@pytest.fixture
def lifecycle(document_store, draft_store, settings, timer_factory, seed_page, nested_forest):
    seed_page(Page(slug="about", title="About", sections=nested_forest))
    lc = PageLifecycle(document_store, draft_store, settings=settings, timer_factory=timer_factory)
    lc.load("about")
    return lc


@pytest.fixture
def controller(lifecycle, catalog):
    return PageEditorController(lifecycle, ComponentResolver(catalog))


def ids(sections):
    return [s.id for s in sections]


# ---------------------------
# Structural edits
# ---------------------------

def test_add_section_selects_and_expands_parent(controller, lifecycle):
    result = controller.handle_add_section("text", parent_id="a")
    assert result.success
    assert controller.selected_id == result.section_id
    assert "a" in controller.expanded_ids
    assert lifecycle.is_dirty


def test_add_component_from_catalog(controller):
    result = controller.handle_add_component("feature-block")
    added = controller.sections[-1]
    assert isinstance(added, ComponentSection) and added.id == result.section_id


def test_add_unknown_component(controller, lifecycle):
    result = controller.handle_add_component("nope")
    assert not result.success
    assert not lifecycle.is_dirty


def test_delete_prunes_presentation_state(controller):
    controller.toggle_expanded("b")
    controller.toggle_expanded("b2")
    controller.select("b2x")
    assert controller.handle_delete("b").success
    assert controller.expanded_ids == set()
    assert controller.selected_id is None
    assert ids(controller.sections) == ["a", "c"]


def test_move_and_affordances(controller):
    assert not controller.can_move_up("a")
    assert controller.can_move_down("a")
    assert not controller.can_move_down("c")
    assert not controller.can_move_up("missing")

    assert not controller.handle_move("a", "up").success
    assert controller.handle_move("a", "down").success
    assert ids(controller.sections) == ["b", "a", "c"]


def test_duplicate_and_update(controller):
    dup = controller.handle_duplicate("c")
    assert ids(controller.sections)[-1] == dup.section_id
    upd = controller.handle_update("c", content="edited")
    assert upd.success
    node = [s for s in controller.sections if s.id == "c"][0]
    assert node.content == "edited"


def test_set_columns_respects_minimum(controller):
    result = controller.handle_add_component("feature-block")
    section_id = result.section_id

    rejected = controller.handle_set_columns(section_id, 2)
    assert not rejected.success
    assert controller.resolve_component(section_id).min_columns == 4

    accepted = controller.handle_set_columns(section_id, 8)
    assert accepted.success
    assert controller.sections[-1].columns == 8


def test_update_cannot_bypass_column_minimum(controller):
    section_id = controller.handle_add_component("feature-block").section_id

    for columns in (2, 40):
        result = controller.handle_update(section_id, columns=columns)
        assert not result.success
        assert controller.sections[-1].columns == 6


def test_set_columns_on_non_component(controller):
    assert not controller.handle_set_columns("a", 4).success


def test_missing_components(controller, lifecycle):
    lifecycle.replace_sections(lifecycle.sections + (ComponentSection(id="x", component_id="gone", order=3),))
    assert [s.id for s in controller.missing_components()] == ["x"]
    assert controller.resolve_component("x").missing
    assert controller.resolve_component("a") is None


# ---------------------------
# Presentation state
# ---------------------------

def test_toggle_expanded(controller):
    assert controller.toggle_expanded("b") is True
    assert controller.toggle_expanded("b") is False
    assert controller.toggle_expanded("ghost") is False


def test_select(controller):
    assert controller.select("b1")
    assert not controller.select("ghost")
    assert controller.selected_id == "b1"
    assert controller.select(None)


# ---------------------------
# Drag and drop
# ---------------------------

def test_palette_drag_into_node(controller):
    assert controller.begin_palette_drag("cta")
    assert controller.hover_node("c")
    result = controller.handle_drop()
    assert result.success
    assert controller.sections[2].children[0].id == result.section_id
    assert "c" in controller.expanded_ids


def test_section_drag_reorders(controller):
    assert controller.begin_section_drag("c")
    controller.hover_gap(None, 0)
    result = controller.handle_drop()
    assert result.operation == "reorder"
    assert ids(controller.sections) == ["c", "a", "b"]


def test_section_drag_cannot_nest_into_itself(controller, lifecycle):
    controller.begin_section_drag("b")
    assert not controller.hover_node("b2")
    result = controller.handle_drop()
    assert not result.success
    assert not lifecycle.is_dirty


def test_cancel_drag(controller):
    controller.begin_catalog_drag("heading")
    controller.hover_gap(None, 0)
    controller.cancel_drag()
    assert not controller.handle_drop().success
    assert ids(controller.sections) == ["a", "b", "c"]


def test_invalid_drag_sources(controller):
    assert not controller.begin_palette_drag("component")
    assert not controller.begin_catalog_drag("nope")
    assert not controller.begin_section_drag("ghost")


def test_controller_edits_schedule_autosave(controller, timer_factory, draft_store):
    controller.handle_add_section("hero")
    timer_factory.last.fire()
    assert len(draft_store.load("about").content.sections) == 4
