"""
Drag-and-drop controller: turns drop results into BoardStore.move_task() calls.

Holds no board state of its own.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .store import BoardStore

logger = logging.getLogger(__name__)

DRAG_CARD = "card"
DRAG_COLUMN = "column"


@dataclass(frozen=True)
class DragLocation:
    droppable_id: str   # column id, e.g. "IN_PROGRESS"
    index: int


@dataclass(frozen=True)
class DropResult:
    """What the UI reports when a drag ends."""
    draggable_id: str
    source: DragLocation
    destination: Optional[DragLocation] = None
    type: str = DRAG_CARD


class DragDropController:

    def __init__(self, store: BoardStore):
        self.store = store

    def handle_drag_end(self, result: DropResult) -> bool:
        """Forward a real card move to the store. Returns True if a move was issued."""
        destination, source = result.destination, result.source

        # Dropped outside any column
        if destination is None:
            return False

        if (
            destination.droppable_id == source.droppable_id
            and destination.index == source.index
        ):
            return False

        if result.type != DRAG_CARD:
            # Column reordering is not supported
            logger.debug(f"Ignoring {result.type} drag of {result.draggable_id}")
            return False

        self.store.move_task(
            result.draggable_id,
            source.droppable_id,
            destination.droppable_id,
            destination.index,
        )
        return True
