import logging

from notesync.client.state import Note
from notesync.client.sync_engine import SyncEngine
from notesync.errors import NotesSyncError

logger = logging.getLogger(__name__)


class ReorderController:
    """Turns a drag gesture into local swaps and one trailing order commit."""

    def __init__(self, engine: SyncEngine) -> None:
        self.engine = engine
        self.active_note_id: int | None = None

    @property
    def active_note(self) -> Note | None:
        """The lifted note, for rendering a drag overlay."""
        if self.active_note_id is None:
            return None
        return self.engine.store.find_note(self.active_note_id)

    def on_drag_start(self, note_id: int) -> None:
        self.active_note_id = note_id

    def on_drag_over(self, dragged_id: int | None, over_id: int | None) -> bool:
        """Swap the dragged note into the hovered note's slot. Returns True if anything moved."""
        if dragged_id is None or over_id is None:
            return False
        store = self.engine.store
        from_index = store.index_of(dragged_id)
        to_index = store.index_of(over_id)
        if from_index == -1 or to_index == -1 or from_index == to_index:
            return False
        self.engine.swap_notes_locally(from_index, to_index)
        return True

    async def on_drag_end(self) -> bool:
        """Commit the final order. The local order is kept whether or not this succeeds."""
        self.active_note_id = None
        try:
            await self.engine.commit_order(self.engine.ordered_note_ids())
        except NotesSyncError as e:
            logger.warning("Note order not saved", extra={"error": e.message})
            return False
        return True
