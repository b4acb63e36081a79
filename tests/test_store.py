"""
Unit tests for the JSON file task store.

Tests loading and saving the task file, atomic writes, every mutating
operation and the query operations.
"""

import json
import os

import pytest

from tasktally.core.tasks.errors import (
    InvalidPatternError,
    InvalidSortFieldError,
    InvalidStatusError,
    TaskFileCorruptedError,
    TaskFileReadError,
    TaskFileWriteError,
)
from tasktally.core.tasks.models import TaskStatus
from tasktally.core.tasks.store import DEFAULT_DATA_FILE, TaskStore


def _record(task_id, status="HOLD", content="x"):
    return {
        "id": task_id,
        "content": content,
        "status": status,
        "created_at": "2026-10-19T08:15:02.123456Z",
        "updated_at": "2026-10-19T08:15:02.123456Z",
    }


# ==============================================================================
# Initialization Tests
# ==============================================================================


class TestTaskStoreInit:
    """Test TaskStore construction."""

    def test_default_data_file(self, tmp_path):
        store = TaskStore()
        assert store.data_file == tmp_path / DEFAULT_DATA_FILE
        assert DEFAULT_DATA_FILE == "todos.json"

    def test_explicit_data_file(self, task_file):
        assert TaskStore(task_file).data_file == task_file

    def test_string_path(self, task_file):
        assert TaskStore(str(task_file)).data_file == task_file


# ==============================================================================
# Load Tests
# ==============================================================================


class TestLoad:
    """Test reading the task file."""

    def test_missing_file_is_empty_store(self, task_file):
        store = TaskStore.open(task_file)
        assert store.is_empty()
        assert len(store) == 0
        assert not task_file.exists()

    def test_load_records(self, task_file):
        task_file.write_text(json.dumps([_record("AAA111"), _record("BBB222", "DONE")]))

        store = TaskStore.open(task_file)

        assert store.ids == {"AAA111", "BBB222"}
        assert store.get("BBB222").status == TaskStatus.DONE
        assert "AAA111" in store

    def test_invalid_json(self, task_file):
        task_file.write_text("{ invalid json")
        with pytest.raises(TaskFileCorruptedError, match="Failed to parse"):
            TaskStore.open(task_file)

    def test_empty_file_is_corrupted(self, task_file):
        task_file.write_text("")
        with pytest.raises(TaskFileCorruptedError):
            TaskStore.open(task_file)

    def test_non_array_json(self, task_file):
        task_file.write_text(json.dumps({"tasks": []}))
        with pytest.raises(TaskFileCorruptedError, match="JSON array"):
            TaskStore.open(task_file)

    def test_invalid_status_tag(self, task_file):
        task_file.write_text(json.dumps([_record("AAA111", "FINISHED")]))
        with pytest.raises(TaskFileCorruptedError, match="record #0"):
            TaskStore.open(task_file)

    def test_invalid_timestamp(self, task_file):
        record = _record("AAA111")
        record["updated_at"] = "not a time"
        task_file.write_text(json.dumps([record]))
        with pytest.raises(TaskFileCorruptedError):
            TaskStore.open(task_file)

    def test_missing_field(self, task_file):
        record = _record("AAA111")
        del record["content"]
        task_file.write_text(json.dumps([record]))
        with pytest.raises(TaskFileCorruptedError):
            TaskStore.open(task_file)

    def test_unreadable_file(self, task_file):
        task_file.mkdir()
        with pytest.raises(TaskFileReadError, match="Failed to read"):
            TaskStore.open(task_file)

    def test_duplicate_ids_keep_last(self, task_file, caplog):
        task_file.write_text(
            json.dumps([_record("AAA111", content="first"), _record("AAA111", content="second")])
        )

        with caplog.at_level("WARNING"):
            store = TaskStore.open(task_file)

        assert len(store) == 1
        assert store.get("AAA111").content == "second"
        assert "Duplicate task ID AAA111" in caplog.text

    def test_load_replaces_memory_state(self, store, task_file):
        store.add("in memory")
        task_file.write_text("[]")
        store.load()
        assert store.is_empty()


# ==============================================================================
# Save / Export Tests
# ==============================================================================


class TestSave:
    """Test writing the task file."""

    def test_round_trip_preserves_records(self, populated_store, task_file):
        reloaded = TaskStore.open(task_file)

        original = {t.id: t for t in populated_store.tasks}
        assert {t.id: t for t in reloaded.tasks} == original

    def test_round_trip_after_mutations(self, store, task_file):
        first = store.add("one")
        store.add("two")
        store.update_status(first.id, TaskStatus.DONE)

        reloaded = TaskStore.open(task_file)

        assert sorted(reloaded.tasks, key=lambda t: t.id) == sorted(
            store.tasks, key=lambda t: t.id
        )

    def test_file_format(self, populated_store, task_file):
        text = task_file.read_text(encoding="utf-8")
        data = json.loads(text)

        assert isinstance(data, list)
        assert text.startswith("[\n  {")
        assert text.endswith("\n")
        assert data[0] == {
            "id": "AAA111",
            "content": "Buy milk",
            "status": "HOLD",
            "created_at": "2026-10-19T08:00:00.123456Z",
            "updated_at": "2026-10-19T08:00:00.123456Z",
        }

    def test_non_ascii_written_verbatim(self, store, task_file):
        store.add("写测试")
        assert "写测试" in task_file.read_text(encoding="utf-8")

    def test_creates_parent_directories(self, tmp_path):
        store = TaskStore(tmp_path / "nested" / "dir" / "todos.json")
        store.save()
        assert store.data_file.exists()
        assert json.loads(store.data_file.read_text()) == []

    def test_no_temp_files_left_behind(self, populated_store, tmp_path):
        leftovers = [p for p in os.listdir(tmp_path) if p.endswith(".tmp")]
        assert leftovers == []

    def test_write_failure(self, store, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store.data_file = blocker / "todos.json"

        with pytest.raises(TaskFileWriteError, match="Failed to write"):
            store.save()


class TestExport:
    """Test export()."""

    def test_export_writes_all_tasks(self, populated_store, tmp_path):
        target = tmp_path / "backup" / "export.json"

        count = populated_store.export(target)

        assert count == 3
        exported = TaskStore.open(target)
        assert exported.ids == populated_store.ids

    def test_export_leaves_backing_file_alone(self, populated_store, task_file, tmp_path):
        before = task_file.read_text()
        populated_store._tasks.clear()

        populated_store.export(tmp_path / "empty.json")

        assert task_file.read_text() == before
        assert json.loads((tmp_path / "empty.json").read_text()) == []

    def test_export_failure(self, populated_store, tmp_path):
        target = tmp_path / "is-a-dir"
        target.mkdir()
        with pytest.raises(TaskFileWriteError):
            populated_store.export(target)


# ==============================================================================
# Mutation Tests
# ==============================================================================


class TestAdd:
    """Test add()."""

    def test_add_creates_hold_task_and_saves(self, store, task_file):
        task = store.add("write tests")

        assert task.status == TaskStatus.HOLD
        assert task.created_at == task.updated_at
        assert store.get(task.id) is task
        assert [r["id"] for r in json.loads(task_file.read_text())] == [task.id]

    def test_duplicate_content_allowed(self, store):
        a = store.add("same")
        b = store.add("same")
        assert a.id != b.id
        assert len(store) == 2

    def test_many_adds_never_overwrite(self, store):
        for i in range(300):
            store.add(f"task {i}")
        assert len(store) == 300
        assert len(store.ids) == 300

    def test_forced_collision_does_not_overwrite(self, store, monkeypatch):
        first = store.add("first")
        candidates = iter([first.id, "ZZZ999"])
        monkeypatch.setattr(
            "tasktally.core.tasks.ids.random_id", lambda length=6: next(candidates)
        )

        second = store.add("second")

        assert second.id == "ZZZ999"
        assert store.get(first.id).content == "first"


class TestUpdateStatus:
    """Test update_status()."""

    def test_update_existing(self, store, task_file):
        task = store.add("write tests")
        before = task.updated_at

        updated = store.update_status(task.id, TaskStatus.DOING)

        assert updated is task
        assert task.status == TaskStatus.DOING
        assert task.updated_at > before
        assert task.updated_at >= task.created_at
        saved = json.loads(task_file.read_text())
        assert saved[0]["status"] == "DOING"

    def test_missing_id_returns_none_and_keeps_file(self, populated_store, task_file):
        before = task_file.read_text()
        mtime = task_file.stat().st_mtime_ns

        assert populated_store.update_status("NOPE00", TaskStatus.DONE) is None

        assert task_file.read_text() == before
        assert task_file.stat().st_mtime_ns == mtime

    def test_missing_id_on_empty_store_creates_no_file(self, store, task_file):
        assert store.update_status("NOPE00", TaskStatus.DONE) is None
        assert not task_file.exists()


class TestDelete:
    """Test delete()."""

    def test_delete_existing(self, populated_store, task_file):
        removed = populated_store.delete("AAA111")

        assert removed.content == "Buy milk"
        assert "AAA111" not in populated_store
        assert "AAA111" not in {r["id"] for r in json.loads(task_file.read_text())}

    def test_delete_missing(self, populated_store, task_file):
        before = task_file.read_text()
        assert populated_store.delete("NOPE00") is None
        assert task_file.read_text() == before
        assert len(populated_store) == 3


class TestClear:
    """Test clear()."""

    def test_clear_all(self, populated_store, task_file):
        removed = populated_store.clear()

        assert len(removed) == 3
        assert populated_store.is_empty()
        assert json.loads(task_file.read_text()) == []

    def test_clear_twice(self, populated_store):
        populated_store.clear()
        assert populated_store.clear() == []
        assert populated_store.is_empty()

    @pytest.mark.parametrize("name", ["done", "DONE", "Done"])
    def test_clear_by_status_ignores_case(self, populated_store, name):
        removed = populated_store.clear(name)

        assert [t.id for t in removed] == ["CCC333"]
        assert populated_store.ids == {"AAA111", "BBB222"}

    def test_clear_invalid_status_changes_nothing(self, populated_store, task_file):
        before = task_file.read_text()

        with pytest.raises(InvalidStatusError):
            populated_store.clear("finished")

        assert len(populated_store) == 3
        assert task_file.read_text() == before

    def test_clear_with_no_match_still_saves(self, store, task_file):
        store.clear("hold")
        assert json.loads(task_file.read_text()) == []


# ==============================================================================
# Query Tests
# ==============================================================================


class TestShow:
    """Test show()."""

    def test_show_all_in_creation_order(self, populated_store):
        assert [t.id for t in populated_store.show()] == ["AAA111", "CCC333", "BBB222"]

    @pytest.mark.parametrize(
        "name,expected",
        [("hold", ["AAA111"]), ("DOING", ["BBB222"]), ("Done", ["CCC333"])],
    )
    def test_show_filtered(self, populated_store, name, expected):
        assert [t.id for t in populated_store.show(name)] == expected

    def test_show_invalid_filter(self, populated_store):
        with pytest.raises(InvalidStatusError):
            populated_store.show("later")

    def test_show_does_not_write(self, populated_store, task_file):
        mtime = task_file.stat().st_mtime_ns
        populated_store.show()
        assert task_file.stat().st_mtime_ns == mtime

    def test_show_keeps_full_content(self, store):
        long_text = "x" * 100
        store.add(long_text)
        assert store.show()[0].content == long_text


class TestSearch:
    """Test search()."""

    def test_plain(self, populated_store):
        result = populated_store.search("buy")
        assert {t.content for t in result} == {"Buy milk", "buy bread"}

    def test_regex(self, populated_store):
        result = populated_store.search("^Buy", use_regex=True)
        assert [t.content for t in result] == ["Buy milk"]

    def test_with_status_filter(self, populated_store):
        result = populated_store.search("buy", status_filter="doing")
        assert [t.id for t in result] == ["BBB222"]

    def test_invalid_regex_changes_nothing(self, populated_store, task_file):
        before = task_file.read_text()
        with pytest.raises(InvalidPatternError):
            populated_store.search("(", use_regex=True)
        assert len(populated_store) == 3
        assert task_file.read_text() == before


class TestSort:
    """Test sort()."""

    def test_sort_by_status(self, populated_store):
        result = populated_store.sort("status")
        assert [t.status for t in result] == [
            TaskStatus.HOLD,
            TaskStatus.DOING,
            TaskStatus.DONE,
        ]

    def test_sort_desc(self, populated_store):
        assert [t.id for t in populated_store.sort("id", descending=True)] == [
            "CCC333",
            "BBB222",
            "AAA111",
        ]

    def test_sort_with_status_filter(self, populated_store):
        assert [t.id for t in populated_store.sort("id", status_filter="hold")] == ["AAA111"]

    def test_invalid_field(self, populated_store):
        with pytest.raises(InvalidSortFieldError):
            populated_store.sort("priority")


# ==============================================================================
# Scenario
# ==============================================================================


class TestLifecycleScenario:
    """Add, start, list, delete and delete again, across fresh loads."""

    def test_full_lifecycle(self, task_file):
        task_id = TaskStore.open(task_file).add("write tests").id

        assert TaskStore.open(task_file).update_status(task_id, TaskStatus.DOING) is not None

        listed = {t.id: t for t in TaskStore.open(task_file).show()}
        assert listed[task_id].status == TaskStatus.DOING
        assert listed[task_id].updated_at > listed[task_id].created_at

        assert TaskStore.open(task_file).delete(task_id) is not None
        assert task_id not in {t.id for t in TaskStore.open(task_file).show()}
        assert TaskStore.open(task_file).delete(task_id) is None
