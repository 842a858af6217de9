import pytest

from pagecraft.core.exceptions import DocumentNotFoundError, StorageError
from pagecraft.core.storage import DocumentStore, FileSystemDocumentStore, InMemoryDocumentStore, load_required


def test_in_memory_store_records_commits():
    store = InMemoryDocumentStore()
    store.save("src/content/pages/a.json", "{}", "Update page: A")
    store.delete("src/content/pages/a.json", "Delete page: A")
    store.delete("src/content/pages/a.json", "Delete page: A")

    assert store.load("src/content/pages/a.json") is None
    assert [(c.message, c.deleted) for c in store.commits] == [
        ("Update page: A", False),
        ("Delete page: A", True),
    ]


def test_list_paths_only_direct_json_children():
    store = InMemoryDocumentStore({
        "src/content/pages/b.json": "{}",
        "src/content/pages/a.json": "{}",
        "src/content/pages/nested/c.json": "{}",
        "src/content/pages/readme.md": "",
        "src/content/layouts/main.json": "{}",
    })
    assert store.list_paths("src/content/pages") == [
        "src/content/pages/a.json",
        "src/content/pages/b.json",
    ]


def test_stores_satisfy_protocol(tmp_path):
    assert isinstance(InMemoryDocumentStore(), DocumentStore)
    assert isinstance(FileSystemDocumentStore(tmp_path), DocumentStore)


class TestFileSystemDocumentStore:
    def test_save_load_list_delete(self, tmp_path):
        store = FileSystemDocumentStore(tmp_path)
        store.save("src/content/pages/about.json", '{"slug": "about"}', "Update page: About")

        assert (tmp_path / "src/content/pages/about.json").is_file()
        assert store.load("src/content/pages/about.json") == '{"slug": "about"}'
        assert store.list_paths("src/content/pages") == ["src/content/pages/about.json"]

        store.delete("src/content/pages/about.json", "Delete page: About")
        assert store.load("src/content/pages/about.json") is None
        assert store.list_paths("src/content/pages") == []

    def test_missing_directory_lists_empty(self, tmp_path):
        assert FileSystemDocumentStore(tmp_path).list_paths("src/content/layouts") == []

    def test_paths_cannot_escape_root(self, tmp_path):
        store = FileSystemDocumentStore(tmp_path / "root")
        with pytest.raises(StorageError):
            store.save("../outside.json", "{}", "nope")

    def test_write_failure_is_storage_error(self, tmp_path):
        store = FileSystemDocumentStore(tmp_path)
        (tmp_path / "src").write_text("a file where a directory should be")
        with pytest.raises(StorageError) as excinfo:
            store.save("src/content/pages/x.json", "{}", "msg")
        assert excinfo.value.retryable
        assert excinfo.value.path == "src/content/pages/x.json"


def test_load_required_raises_not_found():
    store = InMemoryDocumentStore({"src/content/pages/a.json": "{}"})
    assert load_required(store, "src/content/pages/a.json") == "{}"
    with pytest.raises(DocumentNotFoundError) as excinfo:
        load_required(store, "src/content/pages/b.json")
    assert excinfo.value.path == "src/content/pages/b.json"
    assert excinfo.value.retryable is False
