"""Record store: the collaborator that owns Note records.

Both implementations return ``RecordResult`` objects so that partial errors
travel alongside whatever data could be produced, instead of always raising.
"""
from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, Optional, Protocol, TypeVar

from fastapi.concurrency import run_in_threadpool

from notes_drive.errors import NoteNotFoundError

T = TypeVar("T")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def safe_user_dir(base_dir: Path, user_id: str) -> Path:
    # user_id ends up in filesystem paths; keep it strict
    if not user_id or any(ch in user_id for ch in ["/", "\\"]) or ".." in user_id:
        raise ValueError("Invalid user_id")
    return base_dir / "users" / user_id


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


@dataclass(frozen=True)
class Note:
    id: str
    owner: str
    title: str
    created_at: str
    content: Optional[str] = None
    image_key: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Note":
        if not isinstance(raw, dict):
            raise TypeError(f"Note record must be an object, got {type(raw).__name__}")
        # Older records kept the object key under "image"; only image_key is written.
        image_key = raw.get("image_key") or raw.get("image") or None
        return cls(
            id=str(raw["id"]),
            owner=str(raw.get("owner", "")),
            title=raw["title"],
            created_at=raw.get("created_at", ""),
            content=raw.get("content") or None,
            image_key=image_key,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "title": self.title,
            "content": self.content,
            "image_key": self.image_key,
            "created_at": self.created_at,
        }


@dataclass
class RecordResult(Generic[T]):
    data: T
    errors: list[str] = field(default_factory=list)


class RecordStore(Protocol):
    async def list(self) -> RecordResult[list[Note]]: ...

    async def create(self, fields: dict[str, Any]) -> RecordResult[Optional[Note]]: ...

    async def delete(self, note_id: str) -> None: ...


class LocalRecordStore:
    """File-backed record store, one JSON document per note, scoped to one owner."""

    def __init__(self, base_dir: Path, owner: str):
        self.base_dir = base_dir
        self.owner = owner
        self.notes_dir = safe_user_dir(base_dir, owner) / "notes"

    def _note_path(self, note_id: str) -> Path:
        try:
            nid = uuid.UUID(str(note_id))
        except ValueError:
            raise NoteNotFoundError(str(note_id))
        return self.notes_dir / f"{nid}.json"

    def _list_sync(self) -> RecordResult[list[Note]]:
        if not self.notes_dir.exists():
            return RecordResult(data=[])

        notes: list[Note] = []
        errors: list[str] = []
        for p in sorted(self.notes_dir.glob("*.json")):
            try:
                notes.append(Note.from_dict(json.loads(p.read_text(encoding="utf-8"))))
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                errors.append(f"Unreadable note record {p.name}: {exc}")

        notes.sort(key=lambda n: (n.created_at, n.id))
        return RecordResult(data=notes, errors=errors)

    def _create_sync(self, fields: dict[str, Any]) -> RecordResult[Optional[Note]]:
        title = fields.get("title")
        if not title:
            return RecordResult(data=None, errors=["Field 'title' is required"])

        note = Note(
            id=str(uuid.uuid4()),
            owner=self.owner,
            title=title,
            created_at=_utc_now_iso(),
            content=fields.get("content") or None,
            image_key=fields.get("image_key") or None,
        )
        atomic_write_json(self._note_path(note.id), note.to_dict())
        return RecordResult(data=note)

    def _delete_sync(self, note_id: str) -> None:
        path = self._note_path(note_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NoteNotFoundError(str(note_id))

    # file I/O runs in the threadpool so the event loop keeps serving requests
    async def list(self) -> RecordResult[list[Note]]:
        return await run_in_threadpool(self._list_sync)

    async def create(self, fields: dict[str, Any]) -> RecordResult[Optional[Note]]:
        return await run_in_threadpool(self._create_sync, fields)

    async def delete(self, note_id: str) -> None:
        await run_in_threadpool(self._delete_sync, note_id)
