from notesync.models.note import Note
from notesync.models.subitem import Subitem
from notesync.models.user import User

__all__ = ["User", "Note", "Subitem"]
