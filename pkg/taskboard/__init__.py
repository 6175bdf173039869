# Task board: kanban columns kept in sync with the remote task API
#
# Components:
#   schema.py   - Data model (Task, TaskStatus, TaskPriority, Column, Board)
#   api.py      - Remote task API client (requests)
#   sync.py     - Fire-and-forget dispatcher for outbound mutations
#   store.py    - BoardStore: optimistic board state + remote sync
#   dragdrop.py - Drop results → BoardStore.move_task()
#   stats.py    - Board statistics
#   config.py   - YAML/env configuration and logging setup
