#!/usr/bin/env python3
"""
Quick verification that the board store works end-to-end against a live task API.

Usage:
    python verify_board.py --url http://localhost:3000/api --project <project-id>
"""
import argparse
import sys

from pkg.taskboard.config import Config, ConfigError, configure_logging
from pkg.taskboard.schema import TaskPriority, TaskStatus, ValidationError, new_task


def reload(store, step: str) -> bool:
    """Refetch the board; a failed fetch keeps the stale board, so treat it as fatal."""
    store.get_board()
    if store.error:
        print(f"❌ Reload {step} failed: {store.error}")
        return False
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Task board sync verification")
    parser.add_argument("--url", help="Task API base URL (overrides config / TASKBOARD_API_URL)")
    parser.add_argument("--project", required=True, help="Project id for the check task")
    parser.add_argument("--config", help="Path to taskboard.yaml")
    args = parser.parse_args(argv)

    try:
        cfg = Config.load(args.config)
    except ConfigError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1
    if args.url:
        cfg.api_base_url = args.url
    configure_logging(cfg.log_level)

    print("=" * 60)
    print("Task Board Sync Verification")
    print("=" * 60)
    print(f"API: {cfg.api_base_url}")

    store = cfg.build_store()

    print("\n[1/5] Loading board...")
    store.get_board()
    if store.error:
        print(f"❌ {store.error}")
        return 1
    for status, column in store.board.columns.items():
        print(f"   {column.title:<12} {len(column.tasks)}")

    print("\n[2/5] Adding check task to To Do...")
    try:
        task = new_task(
            "Board sync verification check",
            project_id=args.project,
            priority=TaskPriority.LOW,
            description="Created by verify_board.py; safe to delete",
        )
    except ValidationError as e:
        print(f"❌ {e}")
        return 1
    store.add_task(task, TaskStatus.TODO)
    store.flush()
    print(f"✅ Added {task.id}")

    # The server assigns its own id; reload to pick it up
    if not reload(store, "after add"):
        return 1
    check = next(
        (t for t in store.board.column(TaskStatus.TODO).tasks if t.title == task.title),
        None,
    )
    if check is None:
        print("❌ Check task not found after reload")
        return 1

    print("\n[3/5] Moving check task to Done...")
    store.move_task(check.id, TaskStatus.TODO, TaskStatus.DONE, 0)
    store.flush()
    if not reload(store, "after move"):
        return 1
    moved = store.board.find(check.id)
    if moved is None or moved.status != TaskStatus.DONE:
        print(f"❌ Server did not record the move (state: {moved.status.value if moved else 'missing'})")
        return 1
    print(f"   → State: {moved.status.value}")

    print("\n[4/5] Deleting check task...")
    store.delete_task(check.id, TaskStatus.DONE)
    store.flush()

    print("\n[5/5] Reloading board...")
    if not reload(store, "after delete"):
        return 1
    if store.board.find(check.id) is not None:
        print("❌ Check task still present after delete")
        return 1

    stats = store.stats()
    print(f"   Total: {stats['total']}  Done: {stats['completed']}  Overdue: {stats['overdue']}")

    print("\n" + "=" * 60)
    print("✅ ALL CHECKS PASSED")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
