"""
Tests for the task board schema: enums, Task (de)serialization, Board invariants, validation.
"""
from datetime import datetime, timezone

import pytest

from pkg.taskboard.schema import (
    Board,
    Column,
    Task,
    TaskPriority,
    TaskStatus,
    ValidationError,
    make_task_id,
    new_task,
    parse_datetime,
    validate_task_fields,
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Enums
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestTaskStatus:

    @pytest.mark.parametrize("raw, expected", [
        ("TODO", TaskStatus.TODO),
        ("in_progress", TaskStatus.IN_PROGRESS),
        ("in-progress", TaskStatus.IN_PROGRESS),
        (" review ", TaskStatus.REVIEW),
        ("done", TaskStatus.DONE),
        (TaskStatus.DONE, TaskStatus.DONE),
    ])
    def test_from_str(self, raw, expected):
        assert TaskStatus.from_str(raw) == expected

    @pytest.mark.parametrize("raw", ["", "ARCHIVED", "blocked", None, 3])
    def test_unknown_status_rejected(self, raw):
        with pytest.raises(ValueError):
            TaskStatus.from_str(raw)


def test_unknown_priority_defaults_to_medium():
    assert TaskPriority.from_str("urgent") == TaskPriority.MEDIUM
    assert TaskPriority.from_str(None) == TaskPriority.MEDIUM
    assert TaskPriority.from_str("critical") == TaskPriority.CRITICAL


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Task
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_task_from_api_payload():
    task = Task.from_dict({
        "id": "task-1",
        "title": "Test Task",
        "description": "Test description",
        "status": "TODO",
        "priority": "HIGH",
        "dueDate": "2024-12-31T00:00:00.000Z",
        "assignedTo": "user-1",
        "projectId": "project-1",
        "assignee": {"id": "user-1", "name": "John Doe"},
        "project": {"id": "project-1", "title": "Test Project"},
        "createdAt": "2024-01-01T10:00:00Z",
        "updatedAt": "2024-01-02T10:00:00Z",
    })
    assert task.id == "task-1"
    assert task.status == TaskStatus.TODO
    assert task.priority == TaskPriority.HIGH
    assert task.due_date == datetime(2024, 12, 31, tzinfo=timezone.utc)
    assert task.assignee_id() == "user-1"
    assert task.project_id == "project-1"
    assert task.created_at.tzinfo is not None


def test_project_id_derived_from_nested_project():
    task = Task.from_dict({"id": "t", "title": "x", "status": "DONE", "project": {"id": "p9"}})
    assert task.project_id == "p9"


def test_task_without_id_is_malformed():
    with pytest.raises(KeyError):
        Task.from_dict({"title": "x", "status": "TODO"})


def test_create_payload_uses_nested_refs():
    task = Task(
        id="t1",
        title="New",
        priority=TaskPriority.LOW,
        assignee={"id": "u1", "name": "Ann"},
        project={"id": "p1"},
        due_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
    )
    assert task.create_payload(TaskStatus.REVIEW) == {
        "title": "New",
        "description": None,
        "status": "REVIEW",
        "priority": "LOW",
        "dueDate": "2025-03-01T00:00:00+00:00",
        "projectId": "p1",
        "assignedTo": "u1",
    }


def test_to_dict_round_trip_keeps_fields():
    task = Task(id="t1", title="A", status=TaskStatus.IN_PROGRESS, project_id="p")
    restored = Task.from_dict(task.to_dict())
    assert restored == task


def test_with_status_returns_copy():
    task = Task(id="t1", title="A")
    moved = task.with_status(TaskStatus.DONE)
    assert moved.status == TaskStatus.DONE
    assert task.status == TaskStatus.TODO


def test_parse_datetime_handles_empty():
    assert parse_datetime(None) is None
    assert parse_datetime("") is None


@pytest.mark.parametrize("raw, micro", [
    ("2024-05-01T09:30:00.5Z", 500000),
    ("2024-05-01T09:30:00.12Z", 120000),
    ("2024-05-01T09:30:00.1234567+00:00", 123456),
])
def test_parse_datetime_any_fraction_length(raw, micro):
    parsed = parse_datetime(raw)
    assert parsed.microsecond == micro
    assert parsed.tzinfo is not None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Board
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_empty_board_has_all_columns_in_order():
    board = Board.empty()
    assert list(board.columns) == list(TaskStatus)
    assert [c.title for c in board.columns.values()] == ["To Do", "In Progress", "Review", "Done"]


def test_partial_columns_are_filled_in():
    board = Board({TaskStatus.DONE: Column(TaskStatus.DONE, [Task(id="d", title="d", status=TaskStatus.DONE)])})
    assert list(board.columns) == list(TaskStatus)
    assert board.column("DONE").task_ids() == ["d"]


def test_from_tasks_buckets_in_input_order():
    tasks = [
        Task(id="1", title="a", status=TaskStatus.DONE),
        Task(id="2", title="b", status=TaskStatus.TODO),
        Task(id="3", title="c", status=TaskStatus.DONE),
    ]
    board = Board.from_tasks(tasks)
    assert board.column(TaskStatus.DONE).task_ids() == ["1", "3"]
    assert board.column(TaskStatus.TODO).task_ids() == ["2"]
    assert board.find("3").title == "c"
    assert board.find("nope") is None


def test_copy_is_independent():
    board = Board.from_tasks([Task(id="1", title="a")])
    clone = board.copy()
    clone.column("TODO").tasks.clear()
    assert board.column("TODO").task_ids() == ["1"]


def test_board_to_dict_keys():
    data = Board.empty().to_dict()
    assert list(data) == ["TODO", "IN_PROGRESS", "REVIEW", "DONE"]
    assert data["REVIEW"]["tasks"] == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Validation / local synthesis
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestValidation:

    def test_title_stripped(self):
        assert validate_task_fields("  Fix login  ", "p1") == "Fix login"

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_empty_title_rejected(self, title):
        with pytest.raises(ValidationError, match="Title is required"):
            validate_task_fields(title, "p1")

    def test_title_limit(self):
        validate_task_fields("x" * 100, "p1")
        with pytest.raises(ValidationError, match="at most 100"):
            validate_task_fields("x" * 101, "p1")

    def test_project_required(self):
        with pytest.raises(ValidationError, match="Project is required"):
            validate_task_fields("ok", "")


def test_new_task_synthesizes_local_id():
    task = new_task(" Write docs ", project_id="p1", status=TaskStatus.REVIEW)
    assert task.title == "Write docs"
    assert task.status == TaskStatus.REVIEW
    assert task.id.startswith("task-")


def test_make_task_id_format():
    parts = make_task_id().split("-", 2)
    assert parts[0] == "task"
    assert parts[1].isdigit()
    assert len(parts[2]) == 8
