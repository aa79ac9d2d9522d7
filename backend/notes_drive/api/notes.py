from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status

from notes_drive.controller import DisplayNote, ImageUpload, NoteWorkflowController
from notes_drive.errors import BlobStoreError, NoteNotFoundError, RecordStoreError
from notes_drive.logging_setup import LOGGER_NAME
from notes_drive.models.notes import NoteOut, NotesStateOut
from notes_drive.storage.event_log import Event
from notes_drive.utils.jwt_auth import get_current_user, get_token

router = APIRouter(prefix="/notes", tags=["notes"])

logger = logging.getLogger(f"{LOGGER_NAME}.api")


def get_controller(
    request: Request,
    user_id: str = Depends(get_current_user),
    token: str = Depends(get_token),
) -> NoteWorkflowController:
    return request.app.state.sessions.get(user_id, token)


def _out(note: DisplayNote) -> NoteOut:
    return NoteOut(**note.to_dict())


def _state_out(ctl: NoteWorkflowController) -> NotesStateOut:
    state = ctl.state()
    return NotesStateOut(loading=state["loading"], notes=[_out(n) for n in state["notes"]])


@router.get("", response_model=NotesStateOut)
async def list_notes(ctl: NoteWorkflowController = Depends(get_controller)) -> NotesStateOut:
    try:
        await ctl.fetch_notes()
    except RecordStoreError as exc:
        logger.error("Listing notes for %s failed: %s", ctl.identity, exc)
        raise HTTPException(status_code=502, detail="Record store unavailable")
    return _state_out(ctl)


@router.get("/state", response_model=NotesStateOut)
def notes_state(ctl: NoteWorkflowController = Depends(get_controller)) -> NotesStateOut:
    return _state_out(ctl)


@router.post("", status_code=201, response_model=Optional[NoteOut])
async def create_note(
    request: Request,
    title: str = Form(""),
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    ctl: NoteWorkflowController = Depends(get_controller),
):
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            filename=image.filename,
            data=await image.read(),
            content_type=image.content_type or "application/octet-stream",
        )

    try:
        note = await ctl.create_note(title, content, upload)
    except BlobStoreError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except RecordStoreError as exc:
        logger.error("Creating note for %s failed: %s", ctl.identity, exc)
        raise HTTPException(status_code=502, detail="Record store unavailable")

    if note is None:
        # empty title or nothing created: no-op
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    event_log = request.app.state.event_log
    if note.image_key:
        event_log.emit(Event(
            event_type="IMAGE_UPLOADED",
            user_id=ctl.identity,
            note_id=note.id,
            meta={"image_key": note.image_key, "size": len(upload.data) if upload else 0},
        ))
    event_log.emit(Event(event_type="NOTE_CREATED", user_id=ctl.identity, note_id=note.id))

    return _out(note)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    request: Request,
    ctl: NoteWorkflowController = Depends(get_controller),
) -> Response:
    try:
        await ctl.delete_note(note_id)
    except NoteNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except RecordStoreError as exc:
        logger.error("Deleting note %s for %s failed: %s", note_id, ctl.identity, exc)
        raise HTTPException(status_code=502, detail="Record store unavailable")

    request.app.state.event_log.emit(Event(event_type="NOTE_DELETED", user_id=ctl.identity, note_id=note_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
