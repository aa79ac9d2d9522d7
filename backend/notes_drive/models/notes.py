from typing import Optional

from pydantic import BaseModel


class NoteOut(BaseModel):
    id: str
    owner: str
    title: str
    content: Optional[str] = None
    image_key: Optional[str] = None
    image_url: Optional[str] = None
    created_at: str


class NotesStateOut(BaseModel):
    loading: bool
    notes: list[NoteOut]
