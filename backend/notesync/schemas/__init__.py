from notesync.schemas.auth import AuthConfig, Token, TokenData, UserCreate, UserLogin, UserResponse
from notesync.schemas.note import (
    NoteBodyUpdate,
    NoteCreate,
    NoteCreatedResponse,
    NoteDelete,
    NoteResponse,
    NotesListResponse,
    NoteTitleUpdate,
    ReorderRequest,
    SubitemCheckboxUpdate,
    SubitemCreate,
    SubitemCreatedResponse,
    SubitemIn,
    SubitemResponse,
    SubitemTextUpdate,
    SuccessResponse,
)

__all__ = [
    "AuthConfig",
    "Token",
    "TokenData",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "NoteBodyUpdate",
    "NoteCreate",
    "NoteCreatedResponse",
    "NoteDelete",
    "NoteResponse",
    "NotesListResponse",
    "NoteTitleUpdate",
    "ReorderRequest",
    "SubitemCheckboxUpdate",
    "SubitemCreate",
    "SubitemCreatedResponse",
    "SubitemIn",
    "SubitemResponse",
    "SubitemTextUpdate",
    "SuccessResponse",
]
