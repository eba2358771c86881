"""Note service: ownership-checked, transactional mutations of notes and subitems.

Every operation takes the caller's ``owner_id``. Rows owned by somebody else
are indistinguishable from rows that do not exist: both raise
``NotFoundOrUnauthorized``.
"""

import logging
from collections.abc import Sequence

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from notesync.errors import NotesSyncError, NotFoundOrUnauthorized, TransientServerError, ValidationError
from notesync.models import Note, Subitem, User
from notesync.schemas.note import NoteResponse, SubitemIn, SubitemResponse

logger = logging.getLogger(__name__)

NOTE_NOT_FOUND = "Note not found or unauthorized"
SUBITEM_NOT_FOUND = "Subitem not found or unauthorized"


def _note_response(note: Note) -> NoteResponse:
    return NoteResponse(
        note_id=note.id,
        title=note.title,
        note_type=note.note_type,
        body=note.body or "",
        subitems=[
            SubitemResponse(
                subitem_id=s.id,
                note_id=s.note_id,
                text=s.text,
                is_checked=s.is_checked,
            )
            for s in note.subitems
        ],
        display_order=note.display_order,
    )


def _owned_note_ids(owner_id: int):
    return select(Note.id).where(Note.user_id == owner_id)


async def _lock_owner(db: AsyncSession, owner_id: int) -> None:
    """Serialize display-order changes for one owner until the transaction ends."""
    await db.execute(select(User.id).where(User.id == owner_id).with_for_update())


async def _count_notes(db: AsyncSession, owner_id: int) -> int:
    result = await db.execute(select(func.count()).select_from(Note).where(Note.user_id == owner_id))
    return result.scalar_one()


async def _apply_or_404(db: AsyncSession, stmt, message: str) -> None:
    """Run a single conditional statement; zero affected rows means not owned."""
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundOrUnauthorized(message)
    await db.commit()


async def list_notes(db: AsyncSession, owner_id: int) -> list[NoteResponse]:
    result = await db.execute(
        select(Note)
        .where(Note.user_id == owner_id)
        .options(selectinload(Note.subitems))
        .order_by(Note.display_order, Note.id)
    )
    return [_note_response(n) for n in result.scalars().all()]


async def create_note(
    db: AsyncSession,
    owner_id: int,
    *,
    title: str,
    note_type: str,
    body: str = "",
    subitems: Sequence[SubitemIn] = (),
    display_order: int | None = None,
) -> tuple[int, list[int]]:
    """Insert a note and all of its subitems in one transaction.

    The note is appended at the end of the owner's list. A ``display_order``
    sent by a client that is out of date is overridden, not trusted.

    Returns the new note id and the subitem ids in the order given.
    """
    if not title.strip():
        raise ValidationError("Title is required")
    try:
        await _lock_owner(db, owner_id)
        position = await _count_notes(db, owner_id)
        if display_order is not None and display_order != position:
            logger.warning(
                "Client display order out of date",
                extra={"user_id": owner_id, "sent": display_order, "assigned": position},
            )
        note = Note(
            user_id=owner_id,
            title=title,
            note_type=note_type,
            body=body,
            display_order=position,
        )
        db.add(note)
        await db.flush()
        rows = [Subitem(note_id=note.id, text=s.text, is_checked=s.is_checked) for s in subitems]
        if rows:
            db.add_all(rows)
            await db.flush()
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Create note failed", extra={"user_id": owner_id})
        raise TransientServerError("Failed to create note") from e
    logger.info("Created note", extra={"user_id": owner_id, "note_id": note.id, "subitems": len(subitems)})
    return note.id, [row.id for row in rows]


async def delete_note(db: AsyncSession, owner_id: int, note_id: int) -> None:
    """Delete an owned note and close the gap it leaves in display order."""
    try:
        await _lock_owner(db, owner_id)
        result = await db.execute(
            delete(Note)
            .where(Note.id == note_id, Note.user_id == owner_id)
            .returning(Note.display_order)
            .execution_options(synchronize_session=False)
        )
        position = result.scalar_one_or_none()
        if position is None:
            await db.rollback()
            raise NotFoundOrUnauthorized(NOTE_NOT_FOUND)
        await db.execute(
            update(Note)
            .where(Note.user_id == owner_id, Note.display_order > position)
            .values(display_order=Note.display_order - 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Delete note failed", extra={"user_id": owner_id, "note_id": note_id})
        raise TransientServerError("Failed to delete note") from e


async def update_note_title(db: AsyncSession, owner_id: int, note_id: int, title: str) -> None:
    await _apply_or_404(
        db,
        update(Note).where(Note.id == note_id, Note.user_id == owner_id).values(title=title),
        NOTE_NOT_FOUND,
    )


async def update_note_body(db: AsyncSession, owner_id: int, note_id: int, body: str) -> None:
    await _apply_or_404(
        db,
        update(Note).where(Note.id == note_id, Note.user_id == owner_id).values(body=body),
        NOTE_NOT_FOUND,
    )


async def create_subitem(db: AsyncSession, owner_id: int, note_id: int, text: str) -> int:
    result = await db.execute(select(Note.id).where(Note.id == note_id, Note.user_id == owner_id))
    if result.scalar_one_or_none() is None:
        await db.rollback()
        raise NotFoundOrUnauthorized(NOTE_NOT_FOUND)
    subitem = Subitem(note_id=note_id, text=text, is_checked=False)
    db.add(subitem)
    await db.commit()
    return subitem.id


async def update_subitem_checkbox(
    db: AsyncSession, owner_id: int, subitem_id: int, is_checked: bool
) -> None:
    await _apply_or_404(
        db,
        update(Subitem)
        .where(Subitem.id == subitem_id, Subitem.note_id.in_(_owned_note_ids(owner_id)))
        .values(is_checked=is_checked),
        SUBITEM_NOT_FOUND,
    )


async def update_subitem_text(db: AsyncSession, owner_id: int, subitem_id: int, text: str) -> None:
    await _apply_or_404(
        db,
        update(Subitem)
        .where(Subitem.id == subitem_id, Subitem.note_id.in_(_owned_note_ids(owner_id)))
        .values(text=text),
        SUBITEM_NOT_FOUND,
    )


async def delete_subitem(db: AsyncSession, owner_id: int, subitem_id: int) -> None:
    await _apply_or_404(
        db,
        delete(Subitem).where(
            Subitem.id == subitem_id, Subitem.note_id.in_(_owned_note_ids(owner_id))
        ),
        SUBITEM_NOT_FOUND,
    )


async def reorder(db: AsyncSession, owner_id: int, note_ids: Sequence[int]) -> None:
    """Replace the owner's whole ordering with ``note_ids``, all or nothing."""
    if len(set(note_ids)) != len(note_ids):
        raise ValidationError("Duplicate note ids in reorder request")
    try:
        await _lock_owner(db, owner_id)
        owned = await db.execute(
            select(func.count())
            .select_from(Note)
            .where(Note.user_id == owner_id, Note.id.in_(note_ids))
        )
        if owned.scalar_one() != len(note_ids):
            raise NotFoundOrUnauthorized("One or more notes not found or unauthorized")
        if await _count_notes(db, owner_id) != len(note_ids):
            raise ValidationError("Reorder must list every note exactly once")
        if note_ids:
            positions = {note_id: index for index, note_id in enumerate(note_ids)}
            await db.execute(
                update(Note)
                .where(Note.user_id == owner_id, Note.id.in_(note_ids))
                .values(display_order=case(positions, value=Note.id))
                .execution_options(synchronize_session=False)
            )
        await db.commit()
    except NotesSyncError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Reorder failed", extra={"user_id": owner_id})
        raise TransientServerError("Failed to reorder notes") from e
    logger.info("Reordered notes", extra={"user_id": owner_id, "count": len(note_ids)})
