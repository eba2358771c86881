from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

NoteType = Literal["freetext", "subitems"]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class SubitemIn(CamelModel):
    text: str
    is_checked: bool = False


class NoteCreate(CamelModel):
    title: str = Field(max_length=255)
    note_type: NoteType
    body: str = ""
    subitems: list[SubitemIn] = []
    display_order: int | None = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v


class NoteDelete(CamelModel):
    note_id: int


class NoteTitleUpdate(CamelModel):
    note_id: int
    title: str = Field(max_length=255)


class NoteBodyUpdate(CamelModel):
    note_id: int
    body: str


class SubitemCreate(CamelModel):
    note_id: int
    text: str


class SubitemCheckboxUpdate(CamelModel):
    is_checked: bool


class SubitemTextUpdate(CamelModel):
    text: str


class ReorderRequest(CamelModel):
    note_ids: list[int]


class SubitemResponse(CamelModel):
    subitem_id: int
    note_id: int
    text: str
    is_checked: bool


class NoteResponse(CamelModel):
    note_id: int
    title: str
    note_type: NoteType
    body: str
    subitems: list[SubitemResponse] = []
    display_order: int


class SuccessResponse(CamelModel):
    success: bool = True


class NotesListResponse(SuccessResponse):
    notes: list[NoteResponse]


class NoteCreatedResponse(SuccessResponse):
    note_id: int
    subitem_ids: list[int] = []


class SubitemCreatedResponse(SuccessResponse):
    subitem_id: int
