"""
UI Kernel -- Versioned State Store Tests

Optimistic concurrency: every successful save moves the version up by
exactly one; a save naming a stale version fails and writes nothing.
"""

import asyncio

import pytest

from uikernel.errors import NotFoundError, VersionConflictError
from uikernel.store import MemoryStorage, UIStateStore
from uikernel.types import DEFAULT_UI_TREE, INITIAL_UI_VERSION, MAX_HISTORY_ENTRIES


class YieldingStorage(MemoryStorage):
    """MemoryStorage whose reads suspend after reading, so concurrent callers interleave."""

    async def get(self, user_id):
        record = await super().get(user_id)
        await asyncio.sleep(0)
        return record


class BrokenHistoryStorage(MemoryStorage):
    """MemoryStorage whose change log is unavailable."""

    async def append_change(self, user_id, entry):
        raise RuntimeError("history table unavailable")


# ============================================================================
# initialize / load
# ============================================================================


class TestInitialize:
    @pytest.mark.asyncio
    async def test_creates_default_at_version_one(self, store):
        state = await store.initialize("alice")

        assert state.version == INITIAL_UI_VERSION == 1
        assert state.user_id == "alice"
        assert state.tree == DEFAULT_UI_TREE
        assert state.last_modified.endswith("Z")

    @pytest.mark.asyncio
    async def test_existing_state_untouched(self, store):
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)

        state = await store.initialize("alice")
        assert state.version == 2
        assert state.tree == {"component": "Card"}

    @pytest.mark.asyncio
    async def test_load_missing(self, store):
        assert await store.load("nobody") is None

    @pytest.mark.asyncio
    async def test_default_tree_not_shared(self, store):
        a = await store.initialize("a")
        a.tree["children"].clear()
        b = await store.initialize("b")
        assert len(b.tree["children"]) == 2

    @pytest.mark.asyncio
    async def test_initialize_does_not_overwrite_concurrent_write(self):
        storage = YieldingStorage()
        store = UIStateStore(storage)

        async def create_and_save():
            await storage.create("alice", {"version": 1, "userId": "alice", "tree": {}, "lastModified": ""})
            return await store.save("alice", {"component": "Card"}, 1)

        initialized, saved = await asyncio.gather(store.initialize("alice"), create_and_save())

        assert saved.version == 2
        assert initialized.version == 2
        stored = await store.load("alice")
        assert stored.version == 2
        assert stored.tree == {"component": "Card"}


# ============================================================================
# save
# ============================================================================


class TestSave:
    @pytest.mark.asyncio
    async def test_save_increments_version(self, store):
        await store.initialize("alice")
        tree = {"component": "TodoApp", "children": []}

        state = await store.save("alice", tree, 1)

        assert state.version == 2
        loaded = await store.load("alice")
        assert loaded.version == 2
        assert loaded.tree == tree

    @pytest.mark.asyncio
    async def test_monotonic_sequence(self, store):
        await store.initialize("alice")
        versions = []
        for expected in range(1, 6):
            state = await store.save("alice", {"component": "TodoApp", "props": {"title": str(expected)}}, expected)
            versions.append(state.version)
        assert versions == [2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, store):
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)

        with pytest.raises(VersionConflictError) as exc_info:
            await store.save("alice", {"component": "Container"}, 1)

        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 2
        assert exc_info.value.message == "Version conflict: expected 1, got 2"

    @pytest.mark.asyncio
    async def test_conflict_writes_nothing(self, store):
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)

        with pytest.raises(VersionConflictError):
            await store.save("alice", {"component": "Container"}, 5)

        loaded = await store.load("alice")
        assert loaded.version == 2
        assert loaded.tree == {"component": "Card"}

    @pytest.mark.asyncio
    async def test_save_missing_subject(self, store):
        with pytest.raises(NotFoundError, match="User with id 'ghost' not found"):
            await store.save("ghost", {"component": "Card"}, 1)

    @pytest.mark.asyncio
    async def test_saved_tree_is_a_copy(self, store):
        await store.initialize("alice")
        tree = {"component": "Card", "props": {"title": "A"}}
        await store.save("alice", tree, 1)
        tree["props"]["title"] = "B"

        loaded = await store.load("alice")
        assert loaded.tree["props"]["title"] == "A"

    @pytest.mark.asyncio
    async def test_concurrent_saves_one_wins(self):
        store = UIStateStore(YieldingStorage())
        await store.initialize("alice")

        results = await asyncio.gather(
            store.save("alice", {"component": "Card"}, 1),
            store.save("alice", {"component": "Container"}, 1),
            return_exceptions=True,
        )

        wins = [r for r in results if not isinstance(r, Exception)]
        losses = [r for r in results if isinstance(r, VersionConflictError)]
        assert len(wins) == 1
        assert len(losses) == 1
        assert wins[0].version == 2
        assert (losses[0].expected, losses[0].actual) == (1, 2)


# ============================================================================
# reset
# ============================================================================


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_without_prior_state(self, store):
        state = await store.reset("alice")
        assert state.version == 1
        assert state.tree == DEFAULT_UI_TREE
        assert await store.history("alice") == []

    @pytest.mark.asyncio
    async def test_reset_increments_version(self, store):
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)

        state = await store.reset("alice")

        assert state.version == 3
        assert (await store.load("alice")).tree == DEFAULT_UI_TREE

    @pytest.mark.asyncio
    async def test_reset_records_history(self, store):
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)
        await store.reset("alice")

        [entry] = await store.history("alice")
        assert entry.description == "Reset UI to default"
        assert entry.before_tree == {"component": "Card"}
        assert entry.after_tree == DEFAULT_UI_TREE
        assert entry.triggered_by == "reset"

    @pytest.mark.asyncio
    async def test_reset_racing_save_conflicts(self):
        store = UIStateStore(YieldingStorage())
        await store.initialize("alice")

        reset, saved = await asyncio.gather(
            store.reset("alice"),
            store.save("alice", {"component": "Card"}, 1),
            return_exceptions=True,
        )

        assert isinstance(reset, VersionConflictError)
        assert (reset.expected, reset.actual) == (1, 2)
        assert saved.version == 2
        stored = await store.load("alice")
        assert stored.version == 2
        assert stored.tree == {"component": "Card"}

    @pytest.mark.asyncio
    async def test_concurrent_resets_one_wins(self):
        store = UIStateStore(YieldingStorage())
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)

        results = await asyncio.gather(store.reset("alice"), store.reset("alice"), return_exceptions=True)

        wins = [r for r in results if not isinstance(r, Exception)]
        losses = [r for r in results if isinstance(r, VersionConflictError)]
        assert [w.version for w in wins] == [3]
        assert len(losses) == 1
        assert (await store.load("alice")).version == 3
        assert len(await store.history("alice")) == 1

    @pytest.mark.asyncio
    async def test_history_failure_keeps_reset(self):
        store = UIStateStore(BrokenHistoryStorage())
        await store.initialize("alice")
        await store.save("alice", {"component": "Card"}, 1)

        state = await store.reset("alice")

        assert state.version == 3
        assert (await store.load("alice")).tree == DEFAULT_UI_TREE


# ============================================================================
# history
# ============================================================================


class TestHistory:
    @pytest.mark.asyncio
    async def test_newest_first(self, store):
        for i in range(3):
            await store.record_change("alice", f"change {i}", {}, {})

        entries = await store.history("alice")
        assert [e.description for e in entries] == ["change 2", "change 1", "change 0"]

    @pytest.mark.asyncio
    async def test_limit(self, store):
        for i in range(5):
            await store.record_change("alice", f"change {i}", {}, {})

        entries = await store.history("alice", limit=2)
        assert [e.description for e in entries] == ["change 4", "change 3"]
        assert await store.history_count("alice") == 5

    @pytest.mark.asyncio
    async def test_entry_fields(self, store):
        entry = await store.record_change(
            "alice", "Added Text at $.children[0]", {"component": "A"}, {"component": "B"}, triggered_by="toolu_1"
        )
        assert entry.id.startswith("chg_")
        assert entry.timestamp.endswith("Z")

        [stored] = await store.history("alice")
        assert stored == entry

    @pytest.mark.asyncio
    async def test_stored_history_trimmed(self, store):
        for i in range(MAX_HISTORY_ENTRIES + 5):
            await store.record_change("alice", f"change {i}", {}, {})

        assert await store.history_count("alice") == MAX_HISTORY_ENTRIES
        entries = await store.history("alice", limit=MAX_HISTORY_ENTRIES)
        assert entries[0].description == f"change {MAX_HISTORY_ENTRIES + 4}"
        assert entries[-1].description == "change 5"

    @pytest.mark.asyncio
    async def test_subjects_isolated(self, store):
        await store.record_change("alice", "a", {}, {})
        assert await store.history("bob") == []

    @pytest.mark.asyncio
    async def test_delete_clears_state_and_history(self, store, storage):
        await store.initialize("alice")
        await store.record_change("alice", "a", {}, {})

        await storage.delete("alice")

        assert await store.load("alice") is None
        assert await store.history("alice") == []
