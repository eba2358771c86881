"""Client-side note collection and its change notification."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

NoteType = Literal["freetext", "subitems"]


@dataclass
class Subitem:
    text: str
    note_id: int | None = None
    is_checked: bool = False
    # None or a negative temporary id until persisted
    subitem_id: int | None = None

    @property
    def is_pending(self) -> bool:
        return self.subitem_id is None or self.subitem_id < 0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "Subitem":
        return cls(
            subitem_id=data.get("subitemId"),
            note_id=data.get("noteId"),
            text=data.get("text", ""),
            is_checked=bool(data.get("isChecked", False)),
        )


@dataclass
class Note:
    note_id: int
    title: str
    note_type: NoteType
    body: str = ""
    subitems: list[Subitem] = field(default_factory=list)
    display_order: int = 0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "Note":
        return cls(
            note_id=data["noteId"],
            title=data.get("title", ""),
            note_type=data.get("noteType", "freetext"),
            body=data.get("body") or "",
            subitems=[Subitem.from_payload(s) for s in data.get("subitems") or []],
            display_order=data.get("displayOrder", 0),
        )


@dataclass
class NoteSpec:
    """What the user typed into the new-note form."""

    title: str
    note_type: NoteType = "freetext"
    body: str = ""
    subitems: list[Subitem] = field(default_factory=list)

    def to_payload(self, display_order: int) -> dict[str, Any]:
        return {
            "title": self.title,
            "noteType": self.note_type,
            "body": self.body,
            "subitems": [{"text": s.text, "isChecked": s.is_checked} for s in self.subitems],
            "displayOrder": display_order,
        }


Listener = Callable[["NoteStore"], None]


class NoteStore:
    """Ordered notes plus the last user-visible error.

    Every mutation goes through a method here so that subscribers are told
    exactly once per change.
    """

    def __init__(self) -> None:
        self.notes: list[Note] = []
        self.error: str | None = None
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def set_error(self, message: str | None) -> None:
        if self.error == message:
            return
        self.error = message
        self._notify()

    def ordered_note_ids(self) -> list[int]:
        return [n.note_id for n in self.notes]

    def index_of(self, note_id: int) -> int:
        for i, note in enumerate(self.notes):
            if note.note_id == note_id:
                return i
        return -1

    def find_note(self, note_id: int) -> Note | None:
        index = self.index_of(note_id)
        return self.notes[index] if index >= 0 else None

    def find_subitem(self, subitem_id: int) -> Subitem | None:
        for note in self.notes:
            for subitem in note.subitems:
                if subitem.subitem_id == subitem_id:
                    return subitem
        return None

    def _renumber(self) -> None:
        for index, note in enumerate(self.notes):
            note.display_order = index

    def replace(self, notes: list[Note]) -> None:
        self.notes = list(notes)
        self._notify()

    def append_note(self, note: Note) -> None:
        note.display_order = len(self.notes)
        self.notes.append(note)
        self._notify()

    def remove_note(self, note_id: int) -> bool:
        index = self.index_of(note_id)
        if index < 0:
            return False
        del self.notes[index]
        self._renumber()
        self._notify()
        return True

    def move_note(self, from_index: int, to_index: int) -> None:
        size = len(self.notes)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise IndexError(f"move {from_index} -> {to_index} out of range for {size} notes")
        moved = self.notes.pop(from_index)
        self.notes.insert(to_index, moved)
        self._renumber()
        self._notify()

    def set_note_field(self, note_id: int, **values: Any) -> bool:
        note = self.find_note(note_id)
        if note is None:
            return False
        for name, value in values.items():
            setattr(note, name, value)
        self._notify()
        return True

    def append_subitem(self, note_id: int, subitem: Subitem) -> bool:
        note = self.find_note(note_id)
        if note is None:
            return False
        note.subitems.append(subitem)
        self._notify()
        return True

    def set_subitem_field(self, subitem_id: int, **values: Any) -> bool:
        subitem = self.find_subitem(subitem_id)
        if subitem is None:
            return False
        for name, value in values.items():
            setattr(subitem, name, value)
        self._notify()
        return True

    def remove_subitem(self, subitem_id: int) -> bool:
        for note in self.notes:
            for i, subitem in enumerate(note.subitems):
                if subitem.subitem_id == subitem_id:
                    del note.subitems[i]
                    self._notify()
                    return True
        return False
