from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.database import get_db
from notesync.dependencies import get_current_user
from notesync.models import User
from notesync.schemas.note import (
    NoteBodyUpdate,
    NoteCreate,
    NoteCreatedResponse,
    NoteDelete,
    NotesListResponse,
    NoteTitleUpdate,
    ReorderRequest,
    SubitemCheckboxUpdate,
    SubitemCreate,
    SubitemCreatedResponse,
    SubitemTextUpdate,
    SuccessResponse,
)
from notesync.services import notes as note_service

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=NotesListResponse)
async def list_notes(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotesListResponse:
    notes = await note_service.list_notes(db, user.id)
    return NotesListResponse(notes=notes)


@router.post("", response_model=NoteCreatedResponse)
async def create_note(
    data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NoteCreatedResponse:
    note_id, subitem_ids = await note_service.create_note(
        db,
        user.id,
        title=data.title,
        note_type=data.note_type,
        body=data.body,
        subitems=data.subitems,
        display_order=data.display_order,
    )
    return NoteCreatedResponse(note_id=note_id, subitem_ids=subitem_ids)


@router.delete("", response_model=SuccessResponse)
async def delete_note(
    data: NoteDelete,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.delete_note(db, user.id, data.note_id)
    return SuccessResponse()


@router.put("/title", response_model=SuccessResponse)
async def update_note_title(
    data: NoteTitleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.update_note_title(db, user.id, data.note_id, data.title)
    return SuccessResponse()


@router.put("/body", response_model=SuccessResponse)
async def update_note_body(
    data: NoteBodyUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.update_note_body(db, user.id, data.note_id, data.body)
    return SuccessResponse()


@router.put("/reorder", response_model=SuccessResponse)
async def reorder_notes(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.reorder(db, user.id, data.note_ids)
    return SuccessResponse()


@router.post("/subitems", response_model=SubitemCreatedResponse)
async def create_subitem(
    data: SubitemCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SubitemCreatedResponse:
    subitem_id = await note_service.create_subitem(db, user.id, data.note_id, data.text)
    return SubitemCreatedResponse(subitem_id=subitem_id)


@router.patch("/subitems/checkbox/{subitem_id}", response_model=SuccessResponse)
async def update_subitem_checkbox(
    subitem_id: int,
    data: SubitemCheckboxUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.update_subitem_checkbox(db, user.id, subitem_id, data.is_checked)
    return SuccessResponse()


@router.patch("/subitems/text/{subitem_id}", response_model=SuccessResponse)
async def update_subitem_text(
    subitem_id: int,
    data: SubitemTextUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.update_subitem_text(db, user.id, subitem_id, data.text)
    return SuccessResponse()


@router.delete("/subitems/{subitem_id}", response_model=SuccessResponse)
async def delete_subitem(
    subitem_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    await note_service.delete_subitem(db, user.id, subitem_id)
    return SuccessResponse()
