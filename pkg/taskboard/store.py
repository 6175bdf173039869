"""
Task board store: in-memory columns kept in sync with the remote task API.

Every mutation is applied locally first (optimistic), then the matching
request is handed to the SyncDispatcher and forgotten. Local changes are
never rolled back; only get_board() reports failures, through `error`.

Build one store per application and pass it to whoever needs it.
"""
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from .api import TaskApiClient
from .schema import Board, Task, TaskStatus
from .stats import board_stats
from .sync import SyncDispatcher

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch tasks"

ColumnId = Union[TaskStatus, str]
Subscriber = Callable[["BoardStore"], None]

_UNSET = object()


class BoardStore:
    """Owns the Board; the only writer of its columns."""

    def __init__(self, api: TaskApiClient, sync: Optional[SyncDispatcher] = None):
        self.api = api
        self.sync = sync or SyncDispatcher()
        self._board = Board.empty()
        self._loading = False
        self._error: Optional[str] = None
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []

    # ── Observable state ─────────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        return self._board

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback(store)` after every state change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Error in board subscriber {callback!r}: {e}")

    def _set_state(self, board: Any = _UNSET, loading: Any = _UNSET, error: Any = _UNSET) -> None:
        with self._lock:
            if board is not _UNSET:
                self._board = board
            if loading is not _UNSET:
                self._loading = loading
            if error is not _UNSET:
                self._error = error
        self._notify()

    def _column_key(self, column_id: ColumnId) -> Optional[TaskStatus]:
        try:
            return TaskStatus.from_str(column_id)
        except ValueError:
            logger.warning(f"Unknown column {column_id!r}; ignoring")
            return None

    # ── Operations ───────────────────────────────────────────────────────────

    def get_board(self) -> Board:
        """Fetch every task and rebuild the board. Never raises.

        On failure the last-known board is kept and `error` is set.
        """
        self._set_state(loading=True)
        try:
            raw_tasks = self.api.list_tasks()
            tasks = [Task.from_dict(item) for item in raw_tasks]
        except Exception as e:
            logger.warning(f"Error fetching board: {e}")
            self._set_state(loading=False, error=FETCH_ERROR)
            return self._board

        board = Board.from_tasks(tasks)
        logger.info(
            "Board loaded: "
            + ", ".join(f"{s.value}={len(c.tasks)}" for s, c in board.columns.items())
        )
        self._set_state(board=board, loading=False, error=None)
        return board

    def set_board(self, board: Board) -> None:
        """Replace the board wholesale. No validation."""
        self._set_state(board=board)

    def add_task(self, task: Task, column_id: ColumnId) -> None:
        """Append `task` to a column, then POST it."""
        key = self._column_key(column_id)
        if key is None:
            return

        placed = task.with_status(key)
        with self._lock:
            board = self._board.copy()
            board.columns[key].tasks.append(placed)
            self._board = board
        self._notify()

        self.sync.submit(
            f"POST task {task.id}", self.api.create_task, placed.create_payload(key)
        )

    def move_task(
        self,
        task_id: str,
        from_column_id: ColumnId,
        to_column_id: ColumnId,
        new_index: int,
    ) -> None:
        """Move a task between (or within) columns, then PATCH its status.

        A task that is not in the source column is ignored (stale drag event).
        """
        src = self._column_key(from_column_id)
        dst = self._column_key(to_column_id)
        if src is None or dst is None:
            return

        with self._lock:
            idx = self._board.columns[src].index_of(task_id)
            if idx < 0:
                logger.debug(f"move_task: {task_id} not in {src.value}; no-op")
                return
            board = self._board.copy()
            task = board.columns[src].tasks.pop(idx)
            dest = board.columns[dst].tasks
            dest.insert(max(0, min(new_index, len(dest))), task.with_status(dst))
            self._board = board
        self._notify()

        self.sync.submit(
            f"PATCH task {task_id} status={dst.value}",
            self.api.update_task, task_id, {"status": dst.value},
        )

    def update_task_in_column(self, task_id: str, column_id: ColumnId, updated_task: Task) -> None:
        """Replace a task's fields in place, then PATCH the full field set.

        Column membership never changes here; the stored copy keeps the
        column's status.
        """
        key = self._column_key(column_id)
        if key is None:
            return

        with self._lock:
            idx = self._board.columns[key].index_of(task_id)
            if idx < 0:
                logger.debug(f"update_task_in_column: {task_id} not in {key.value}; no-op")
                return
            if updated_task.status != key:
                logger.debug(
                    f"update_task_in_column: keeping {task_id} in {key.value} "
                    f"(edit asked for {updated_task.status.value})"
                )
            placed = updated_task.with_status(key)
            board = self._board.copy()
            board.columns[key].tasks[idx] = placed
            self._board = board
        self._notify()

        self.sync.submit(
            f"PATCH task {task_id}", self.api.update_task, task_id, placed.update_payload()
        )

    def delete_task(self, task_id: str, column_id: ColumnId) -> None:
        """Drop a task from its column, then DELETE it remotely."""
        key = self._column_key(column_id)
        if key is None:
            return

        with self._lock:
            idx = self._board.columns[key].index_of(task_id)
            if idx < 0:
                logger.debug(f"delete_task: {task_id} not in {key.value}; no-op")
                return
            board = self._board.copy()
            del board.columns[key].tasks[idx]
            self._board = board
        self._notify()

        self.sync.submit(f"DELETE task {task_id}", self.api.delete_task, task_id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for outbound requests still in flight."""
        self.sync.flush(timeout)

    def stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return board_stats(self._board, now=now)
