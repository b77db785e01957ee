"""Tests for the staged-write metadata store."""

import pytest

from tagmask.grammar.metadata import MetadataStore


class TestReadWrite:
    """Basic mapping behavior."""

    def test_initial_values(self) -> None:
        store = MetadataStore({"el_enabled": True})
        assert store.get("el_enabled") is True
        assert store.get("missing") is None
        assert store.get("missing", 3) == 3

    def test_initial_dict_is_copied(self) -> None:
        initial = {"a": 1}
        store = MetadataStore(initial)
        store.set("a", 2)
        assert initial == {"a": 1}

    def test_contains(self) -> None:
        store = MetadataStore({"a": None})
        assert "a" in store
        assert "b" not in store

    def test_delete_at_bottom(self) -> None:
        store = MetadataStore({"a": 1})
        store.delete("a")
        assert "a" not in store


class TestTransactions:
    """begin/commit/rollback layering."""

    def test_rollback_discards(self) -> None:
        store = MetadataStore({"el_enabled": True})
        store.begin()
        store.set("el_enabled", False)
        assert store.get("el_enabled") is False
        store.rollback()
        assert store.get("el_enabled") is True

    def test_commit_folds_into_parent(self) -> None:
        store = MetadataStore()
        store.begin()
        store.begin()
        store.set("a", 1)
        store.commit()
        assert store.depth == 1
        assert store.get("a") == 1
        store.rollback()
        assert "a" not in store

    def test_nested_commit_to_bottom(self) -> None:
        store = MetadataStore()
        store.begin()
        store.set("a", 1)
        store.begin()
        store.set("b", 2)
        store.commit()
        store.commit()
        assert store.snapshot() == {"a": 1, "b": 2}
        assert store.depth == 0

    def test_staged_delete_hides_value(self) -> None:
        store = MetadataStore({"a": 1})
        store.begin()
        store.delete("a")
        assert "a" not in store
        assert store.get("a", "gone") == "gone"
        store.rollback()
        assert store.get("a") == 1

    def test_staged_delete_commits(self) -> None:
        store = MetadataStore({"a": 1})
        store.begin()
        store.delete("a")
        store.commit()
        assert store.snapshot() == {}

    def test_commit_without_begin(self) -> None:
        with pytest.raises(RuntimeError):
            MetadataStore().commit()

    def test_rollback_without_begin(self) -> None:
        with pytest.raises(RuntimeError):
            MetadataStore().rollback()


class TestTransactionContextManager:
    """transaction() commits on success and rolls back on error."""

    def test_commits(self) -> None:
        store = MetadataStore()
        with store.transaction() as staged:
            staged.set("a", 1)
        assert store.get("a") == 1
        assert store.depth == 0

    def test_rolls_back_on_error(self) -> None:
        store = MetadataStore()
        with pytest.raises(ValueError):
            with store.transaction():
                store.set("a", 1)
                raise ValueError("boom")
        assert "a" not in store
        assert store.depth == 0


class TestRepr:
    def test_repr_shows_visible_state(self) -> None:
        store = MetadataStore({"a": 1})
        store.begin()
        assert repr(store) == "MetadataStore({'a': 1}, depth=1)"
