"""Edit-state machines sitting between user input and the sync engine."""

import enum
import logging
from collections.abc import Awaitable, Callable

from notesync.client.state import Note, NoteSpec, NoteType, Subitem
from notesync.client.sync_engine import SyncEngine

logger = logging.getLogger(__name__)


class EditState(enum.Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class FieldEditor:
    """Viewing -> Editing -> Viewing for one text field.

    ``cancel`` discards the draft. A failed ``save`` stays in Editing with the
    attempted value still in the draft, then re-raises.
    """

    def __init__(self, read: Callable[[], str], write: Callable[[str], Awaitable[None]]) -> None:
        self._read = read
        self._write = write
        self.state = EditState.VIEWING
        self.draft = ""

    @property
    def is_editing(self) -> bool:
        return self.state is EditState.EDITING

    @property
    def value(self) -> str:
        return self.draft if self.is_editing else self._read()

    def begin_edit(self) -> None:
        if not self.is_editing:
            self.draft = self._read()
            self.state = EditState.EDITING

    def set_draft(self, text: str) -> None:
        self.draft = text

    async def save(self) -> None:
        if not self.is_editing:
            return
        await self._write(self.draft)
        self.state = EditState.VIEWING

    def cancel(self) -> None:
        self.draft = self._read()
        self.state = EditState.VIEWING


class NoteEditor:
    """Per-note editing: title, body, and the checklist with its blank trailing entry."""

    def __init__(self, engine: SyncEngine, note_id: int) -> None:
        self.engine = engine
        self.note_id = note_id
        self.title = FieldEditor(
            lambda: self._field("title"),
            lambda text: engine.update_note_title(note_id, text),
        )
        self.body = FieldEditor(
            lambda: self._field("body"),
            lambda text: engine.update_note_body(note_id, text),
        )
        self.placeholder = self._blank()

    def _blank(self) -> Subitem:
        return Subitem(text="", note_id=self.note_id)

    @property
    def note(self) -> Note | None:
        return self.engine.store.find_note(self.note_id)

    def _field(self, name: str) -> str:
        note = self.note
        return getattr(note, name) if note is not None else ""

    async def on_placeholder_text(self, text: str) -> Subitem | None:
        """Persist the blank entry once it has text, then offer a fresh blank one.

        If creation fails the typed text stays in the placeholder for a retry.
        """
        if not text.strip():
            return None
        checked = self.placeholder.is_checked
        self.placeholder.text = text
        subitem = await self.engine.add_subitem(self.note_id, text)
        self.placeholder = self._blank()
        if subitem is not None and checked and subitem.subitem_id is not None:
            await self.engine.update_subitem_checkbox(subitem.subitem_id, True)
        return subitem

    async def on_subitem_text(self, subitem: Subitem, text: str) -> None:
        if subitem.text == text or subitem.is_pending:
            return
        await self.engine.update_subitem_text(subitem.subitem_id, text)

    async def on_subitem_toggled(self, subitem: Subitem) -> None:
        if subitem.is_pending:
            # Only the blank entry has no id; its state is local until it gets text
            self.placeholder.is_checked = not self.placeholder.is_checked
            return
        await self.engine.update_subitem_checkbox(subitem.subitem_id, not subitem.is_checked)

    async def on_subitem_delete(self, subitem: Subitem) -> None:
        if not subitem.is_pending:
            await self.engine.delete_subitem(subitem.subitem_id)

    async def delete(self) -> None:
        await self.engine.delete_note(self.note_id)


class NewNoteDraft:
    """The new-note form. Its checklist items stay local until the note is submitted."""

    def __init__(self, engine: SyncEngine, note_type: NoteType = "freetext") -> None:
        self.engine = engine
        self.note_type: NoteType = note_type
        self.title = ""
        self.body = ""
        self.subitems: list[Subitem] = []
        self.placeholder_checked = False
        self._next_temp_id = -1

    def _pending(self, temp_id: int) -> Subitem:
        for subitem in self.subitems:
            if subitem.subitem_id == temp_id:
                return subitem
        raise KeyError(temp_id)

    def add_subitem(self, text: str) -> Subitem | None:
        """Hold a checklist item locally under a negative temporary id."""
        if not text.strip():
            return None
        subitem = Subitem(text=text, is_checked=self.placeholder_checked, subitem_id=self._next_temp_id)
        self._next_temp_id -= 1
        self.subitems.append(subitem)
        return subitem

    def update_subitem(self, temp_id: int, text: str) -> None:
        self._pending(temp_id).text = text

    def toggle_subitem(self, temp_id: int) -> None:
        subitem = self._pending(temp_id)
        subitem.is_checked = not subitem.is_checked

    def toggle_placeholder(self) -> None:
        self.placeholder_checked = not self.placeholder_checked

    def remove_subitem(self, temp_id: int) -> None:
        self.subitems.remove(self._pending(temp_id))

    def to_spec(self) -> NoteSpec:
        if self.note_type == "freetext":
            return NoteSpec(title=self.title, note_type="freetext", body=self.body)
        return NoteSpec(title=self.title, note_type="subitems", subitems=list(self.subitems))

    async def submit(self) -> Note:
        note = await self.engine.add_note(self.to_spec())
        self.title = ""
        self.body = ""
        self.subitems = []
        logger.debug("Submitted new note", extra={"note_id": note.note_id})
        return note
