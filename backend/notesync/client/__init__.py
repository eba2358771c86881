"""Notes client: auth, transport, sync engine, reorder and edit controllers."""

from notesync.client.auth import AuthService, CurrentUser
from notesync.client.commands import OptimisticUpdate
from notesync.client.editing import EditState, FieldEditor, NewNoteDraft, NoteEditor
from notesync.client.reorder import ReorderController
from notesync.client.state import Note, NoteSpec, NoteStore, Subitem
from notesync.client.sync_engine import SyncEngine, create_sync_engine
from notesync.client.transport import NotesApiClient

__all__ = [
    "AuthService",
    "CurrentUser",
    "EditState",
    "FieldEditor",
    "NewNoteDraft",
    "Note",
    "NoteEditor",
    "NoteSpec",
    "NoteStore",
    "NotesApiClient",
    "OptimisticUpdate",
    "ReorderController",
    "Subitem",
    "SyncEngine",
    "create_sync_engine",
]
