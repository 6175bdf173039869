"""Shared test fixtures for the task board store tests."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root (pkg/, verify_board.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from pkg.taskboard.api import TaskApiError
from pkg.taskboard.store import BoardStore
from pkg.taskboard.sync import SyncDispatcher


class FakeTaskApi:
    """In-memory stand-in for TaskApiClient.

    Holds server-side task dicts, assigns ids on create, and records every
    call as (method, args) in `calls`. Set `fail` to make every call raise,
    or add method names to `fail_on` to make just those calls raise.
    """

    def __init__(self, tasks=None):
        self.tasks = [dict(t) for t in (tasks or [])]
        self.calls = []
        self.fail = False
        self.fail_on = set()
        self._next_id = 1

    def _check(self):
        if self.fail or self.calls[-1][0] in self.fail_on:
            raise TaskApiError("HTTP 500: Internal Server Error", status_code=500)

    def list_tasks(self):
        self.calls.append(("list_tasks", ()))
        self._check()
        return [dict(t) for t in self.tasks]

    def create_task(self, payload):
        self.calls.append(("create_task", (payload,)))
        self._check()
        created = dict(payload, id=f"srv-{self._next_id}")
        self._next_id += 1
        self.tasks.append(created)
        return created

    def update_task(self, task_id, fields):
        self.calls.append(("update_task", (task_id, fields)))
        self._check()
        for t in self.tasks:
            if t["id"] == task_id:
                t.update(fields)
                return dict(t)
        raise TaskApiError("HTTP 404: Task not found", status_code=404)

    def delete_task(self, task_id):
        self.calls.append(("delete_task", (task_id,)))
        self._check()
        self.tasks = [t for t in self.tasks if t["id"] != task_id]

    def mutations(self):
        return [c for c in self.calls if c[0] != "list_tasks"]


@pytest.fixture
def api():
    return FakeTaskApi()


@pytest.fixture
def store(api):
    """Store wired to the fake API; mutations are sent inline."""
    return BoardStore(api, SyncDispatcher(background=False))
