"""Shared fixtures for the PageCraft test suite."""

import json
import logging
from typing import Callable, List

import pytest

from pagecraft.core.models import (
    ComponentField,
    CompositeComponent,
    CompositeInstance,
    ContentPaths,
    EditorSettings,
    HeroSection,
    Page,
    PrimitiveComponent,
    TextSection,
)
from pagecraft.core.storage import InMemoryDocumentStore, InMemoryDraftStore, StaticComponentCatalog

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class FakeTimer:
    """Timer stand-in that only fires when the test says so."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]

    def active(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]


def node(section_id: str, *children, order: int = 0):
    """Small text section with the given children, orders left as given."""
    return TextSection(id=section_id, order=order, content=section_id, children=tuple(children))


def forest(*ids: str):
    return tuple(node(section_id, order=i) for i, section_id in enumerate(ids))


def assert_contiguous(sections) -> None:
    for index, section in enumerate(sections):
        assert section.order == index, f"{section.id} has order {section.order} at {index}"
        assert_contiguous(section.children)


@pytest.fixture
def nested_forest():
    """a, b(b1, b2(b2x)), c."""
    b2 = node("b2", node("b2x"), order=1)
    b = node("b", node("b1"), b2, order=1)
    return (node("a"), b, node("c", order=2))


@pytest.fixture
def settings():
    return EditorSettings(autosave_delay_seconds=3.0, content_paths=ContentPaths())


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def draft_store():
    return InMemoryDraftStore()


def store_page(store: InMemoryDocumentStore, page: Page) -> None:
    store.save(f"src/content/pages/{page.slug}.json", json.dumps(page.to_dict()), "seed")
    store.commits.clear()


@pytest.fixture
def heading_primitive():
    return PrimitiveComponent(
        id="heading",
        name="Heading",
        fields=(
            ComponentField(name="text", label="Text", required=True, default_value="Untitled"),
            ComponentField(name="level", label="Level", type="number"),
        ),
        icon="H",
    )


@pytest.fixture
def feature_composite():
    return CompositeComponent(
        id="feature-block",
        name="Feature Block",
        components=(
            CompositeInstance(id="h", primitive="heading", props={"text": "{{title}}"}),
            CompositeInstance(id="p", primitive="paragraph", props={"text": "{{body}} by {{author}}", "size": 3}),
        ),
        data_schema=(
            ComponentField(name="title", label="Title", default_value="Feature"),
            ComponentField(name="body", label="Body"),
            ComponentField(name="author", label="Author"),
        ),
        min_columns=4,
        default_columns=6,
    )


@pytest.fixture
def catalog(heading_primitive, feature_composite):
    return StaticComponentCatalog([heading_primitive], [feature_composite])


@pytest.fixture
def hero():
    return HeroSection(id="hero-1", title="Welcome")


@pytest.fixture
def make_node():
    return node


@pytest.fixture
def make_forest():
    return forest


@pytest.fixture
def check_orders():
    return assert_contiguous


@pytest.fixture
def seed_page(document_store):
    def _seed(page: Page) -> None:
        store_page(document_store, page)
    return _seed
