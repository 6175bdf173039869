"""Board statistics for dashboards and reports."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .schema import Board, TaskPriority, TaskStatus


def board_stats(board: Board, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Counts by status and priority, plus overdue and completion figures.

    A task is overdue when its due date is before `now` and it is not DONE.
    """
    now = now or datetime.now(timezone.utc)

    by_status = {s.value: len(board.columns[s].tasks) for s in TaskStatus}
    by_priority = {p.value: 0 for p in TaskPriority}
    overdue = 0

    for task in board.tasks():
        by_priority[task.priority.value] += 1
        if task.status != TaskStatus.DONE and task.due_date and _before(task.due_date, now):
            overdue += 1

    total = sum(by_status.values())
    completed = by_status[TaskStatus.DONE.value]

    return {
        "total": total,
        "by_status": by_status,
        "by_priority": by_priority,
        "completed": completed,
        "overdue": overdue,
        "completion_rate": completed / total if total else 0.0,
    }


def _before(due: datetime, now: datetime) -> bool:
    # Naive due dates are taken as UTC
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return due < now
