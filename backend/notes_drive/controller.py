"""Note workflow controller.

Orchestrates list/create/delete against a record store and a blob store and
keeps the UI-facing state ``{loading, notes}`` for one identity. All methods
run on a single event loop; the notes list is only replaced whole (fetch) or
structurally updated (prepend on create, filter on delete).
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from pathlib import PurePath
from typing import Any, Optional

from notes_drive.logging_setup import LOGGER_NAME
from notes_drive.storage.blobs import BlobStore, media_prefix
from notes_drive.storage.records import Note, RecordStore

logger = logging.getLogger(f"{LOGGER_NAME}.controller")


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class DisplayNote:
    id: str
    owner: str
    title: str
    created_at: str
    content: Optional[str] = None
    image_key: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_note(cls, note: Note, image_url: Optional[str] = None) -> "DisplayNote":
        return cls(
            id=note.id,
            owner=note.owner,
            title=note.title,
            created_at=note.created_at,
            content=note.content,
            image_key=note.image_key,
            image_url=image_url,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "title": self.title,
            "content": self.content,
            "image_key": self.image_key,
            "image_url": self.image_url,
            "created_at": self.created_at,
        }


def build_image_key(identity: str, filename: str, now_ms: Optional[int] = None) -> str:
    """Object key for a fresh upload: ``media/<identity>/<epoch ms>_<basename>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    # browsers may send full client paths
    name = PurePath(filename.replace("\\", "/")).name or "upload"
    return f"{media_prefix(identity)}{now_ms}_{name}"


class NoteWorkflowController:
    def __init__(self, records: RecordStore, blobs: BlobStore, identity: str):
        self.records = records
        self.blobs = blobs
        self.identity = identity
        self.notes: list[DisplayNote] = []
        self._fetches = 0

    @property
    def loading(self) -> bool:
        # stays true until the last overlapping fetch settles
        return self._fetches > 0

    def state(self) -> dict[str, Any]:
        return {"loading": self.loading, "notes": list(self.notes)}

    async def resolve_image_url(self, image_key: Optional[str]) -> Optional[str]:
        if not image_key:
            return None
        try:
            return await self.blobs.resolve_url(image_key, self.identity)
        except Exception as exc:
            logger.warning("Image URL resolution failed for %s: %s", image_key, exc)
            return None

    async def _enrich(self, note: Note) -> DisplayNote:
        display = DisplayNote.from_note(note)
        if note.image_key:
            url = await self.resolve_image_url(note.image_key)
            if url:
                display = replace(display, image_url=url)
        return display

    async def fetch_notes(self) -> list[DisplayNote]:
        self._fetches += 1
        try:
            result = await self.records.list()
            if result.errors:
                logger.error("List errors for %s: %s", self.identity, result.errors)

            enriched = await asyncio.gather(*(self._enrich(n) for n in result.data or []))
            self.notes = list(enriched)
            return self.notes
        finally:
            self._fetches -= 1

    async def create_note(
        self,
        title: str,
        content: Optional[str] = None,
        image: Optional[ImageUpload] = None,
    ) -> Optional[DisplayNote]:
        title = (title or "").strip()
        if not title:
            return None
        content = (content or "").strip() or None

        image_key = None
        if image is not None:
            image_key = build_image_key(self.identity, image.filename)
            # the record must never point at an unfinished upload
            await self.blobs.upload(image_key, image.data, image.content_type, self.identity)

        fields: dict[str, Any] = {"title": title, "content": content}
        if image_key:
            fields["image_key"] = image_key

        result = await self.records.create(fields)
        if result.errors:
            logger.error("Create errors for %s: %s", self.identity, result.errors)
        if result.data is None:
            return None

        created = await self._enrich(result.data)
        self.notes = [created] + [n for n in self.notes if n.id != created.id]
        logger.info("Created note %s for %s", created.id, self.identity)
        return created

    async def delete_note(self, note_id: str) -> None:
        await self.records.delete(note_id)
        self.notes = [n for n in self.notes if n.id != note_id]
        logger.info("Deleted note %s for %s", note_id, self.identity)
