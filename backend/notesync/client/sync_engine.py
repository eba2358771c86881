"""Sync engine: the client's single source of truth for the note collection.

Structural changes (creating or deleting a note or subitem, editing a title
or body) are applied locally only after the server confirms them. Scalar
subitem edits (checkbox, text) are applied optimistically and reverted to
their previous value if the request fails. Reordering is local and sticky:
the permutation is never rolled back.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from notesync.client.auth import AuthService
from notesync.client.commands import OptimisticUpdate
from notesync.client.state import Note, NoteSpec, NoteStore, Subitem
from notesync.client.transport import NotesApiClient
from notesync.errors import NotesSyncError, ValidationError

logger = logging.getLogger(__name__)


class SyncEngine:
    def __init__(
        self,
        api: NotesApiClient,
        store: NoteStore | None = None,
        *,
        resync_on_reorder_failure: bool = False,
    ) -> None:
        self.api = api
        self.store = store or NoteStore()
        self.resync_on_reorder_failure = resync_on_reorder_failure

    @property
    def notes(self) -> list[Note]:
        return self.store.notes

    def ordered_note_ids(self) -> list[int]:
        return self.store.ordered_note_ids()

    @contextmanager
    def _reporting(self, operation: str) -> Iterator[None]:
        """Clear the visible error, then record and re-raise any failure."""
        self.store.set_error(None)
        try:
            yield
        except NotesSyncError as e:
            logger.warning(
                "Sync operation failed",
                extra={"operation": operation, "error_type": type(e).__name__, "error": e.message},
            )
            self.store.set_error(e.message)
            raise

    async def load(self) -> list[Note]:
        with self._reporting("load"):
            data = await self.api.fetch_notes()
        notes = [Note.from_payload(n) for n in data.get("notes", [])]
        self.store.replace(notes)
        return notes

    async def add_note(self, spec: NoteSpec) -> Note:
        with self._reporting("add_note"):
            if not spec.title.strip():
                raise ValidationError("Title is required")
            display_order = len(self.store.notes)
            data = await self.api.create_note(spec.to_payload(display_order))
        note_id = data["noteId"]
        subitem_ids = data.get("subitemIds") or []
        subitems = [
            Subitem(
                text=s.text,
                note_id=note_id,
                is_checked=s.is_checked,
                subitem_id=subitem_ids[i] if i < len(subitem_ids) else None,
            )
            for i, s in enumerate(spec.subitems)
        ]
        note = Note(
            note_id=note_id,
            title=spec.title,
            note_type=spec.note_type,
            body=spec.body,
            subitems=subitems,
            display_order=display_order,
        )
        self.store.append_note(note)
        return note

    async def delete_note(self, note_id: int) -> None:
        with self._reporting("delete_note"):
            await self.api.delete_note(note_id)
        self.store.remove_note(note_id)

    async def update_note_title(self, note_id: int, title: str) -> None:
        with self._reporting("update_note_title"):
            await self.api.update_note_title(note_id, title)
        self.store.set_note_field(note_id, title=title)

    async def update_note_body(self, note_id: int, body: str) -> None:
        with self._reporting("update_note_body"):
            await self.api.update_note_body(note_id, body)
        self.store.set_note_field(note_id, body=body)

    async def add_subitem(self, note_id: int, text: str) -> Subitem | None:
        if not text.strip():
            return None
        with self._reporting("add_subitem"):
            data = await self.api.create_subitem(note_id, text)
        subitem = Subitem(text=text, note_id=note_id, is_checked=False, subitem_id=data["subitemId"])
        self.store.append_subitem(note_id, subitem)
        return subitem

    def _optimistic_subitem_edit(self, subitem_id: int, field: str, value: object) -> OptimisticUpdate:
        current = self.store.find_subitem(subitem_id)
        if current is None:
            return OptimisticUpdate(apply=lambda: None, revert=lambda: None)
        previous = getattr(current, field)
        return OptimisticUpdate(
            apply=lambda: self.store.set_subitem_field(subitem_id, **{field: value}),
            revert=lambda: self.store.set_subitem_field(subitem_id, **{field: previous}),
        )

    async def update_subitem_checkbox(self, subitem_id: int, is_checked: bool) -> None:
        update = self._optimistic_subitem_edit(subitem_id, "is_checked", is_checked)
        with self._reporting("update_subitem_checkbox"):
            await update.run(lambda: self.api.update_subitem_checkbox(subitem_id, is_checked))

    async def update_subitem_text(self, subitem_id: int, text: str) -> None:
        update = self._optimistic_subitem_edit(subitem_id, "text", text)
        with self._reporting("update_subitem_text"):
            await update.run(lambda: self.api.update_subitem_text(subitem_id, text))

    async def delete_subitem(self, subitem_id: int) -> None:
        with self._reporting("delete_subitem"):
            await self.api.delete_subitem(subitem_id)
        self.store.remove_subitem(subitem_id)

    def swap_notes_locally(self, from_index: int, to_index: int) -> None:
        """Move the note at ``from_index`` to ``to_index``. No request is sent."""
        if from_index == to_index:
            return
        self.store.move_note(from_index, to_index)

    async def commit_order(self, note_ids: list[int] | None = None) -> None:
        """Persist the full order. The local permutation stays even on failure."""
        ids = list(note_ids) if note_ids is not None else self.ordered_note_ids()
        try:
            with self._reporting("commit_order"):
                await self.api.reorder_notes(ids)
        except NotesSyncError:
            if self.resync_on_reorder_failure:
                await self._resync_after_failure()
            raise

    async def _resync_after_failure(self) -> None:
        error = self.store.error
        try:
            await self.load()
        except NotesSyncError as e:
            logger.warning("Resync after reorder failure failed", extra={"error": e.message})
        # Keep the reorder failure visible rather than the reload outcome
        self.store.set_error(error)


def create_sync_engine(
    auth: AuthService,
    base_url: str = "",
    *,
    client: httpx.AsyncClient | None = None,
    resync_on_reorder_failure: bool = False,
) -> SyncEngine:
    """Wire an engine to an auth service: its token on every request, its logout on 401.

    Logging out, for whatever reason, also empties the local collection.
    """
    api = NotesApiClient(base_url, token=auth.token, on_unauthorized=auth.logout, client=client)
    engine = SyncEngine(api, resync_on_reorder_failure=resync_on_reorder_failure)
    auth.on_logout(lambda: engine.store.replace([]))
    return engine
