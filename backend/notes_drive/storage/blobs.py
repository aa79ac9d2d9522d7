"""Blob store for note images.

Objects live under ``media/{identity}/...``; an identity may only write or
resolve objects below its own prefix. Display URLs are time-limited and carry
a signed token that ``open`` checks before handing out the file.
"""
from __future__ import annotations

import json
import os
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol
from urllib.parse import quote

from fastapi.concurrency import run_in_threadpool

from notes_drive.errors import AccessDeniedError, BlobNotFoundError
from notes_drive.storage.records import atomic_write_json
from notes_drive.utils.url_signing import UrlSigner

MEDIA_PREFIX = "media"
_META_SUFFIX = ".meta.json"
FALLBACK_CONTENT_TYPE = "application/octet-stream"


def stored_content_type(content_type: Optional[str]) -> str:
    """Only image types are served as-is; anything else is served as opaque bytes."""
    value = (content_type or "").split(";")[0].strip().lower()
    if value.startswith("image/") and value != "image/svg+xml":
        return value
    return FALLBACK_CONTENT_TYPE


def media_prefix(identity: str) -> str:
    return f"{MEDIA_PREFIX}/{identity}/"


def check_scope(path: str, identity: str) -> None:
    parts = PurePosixPath(path).parts
    if (
        len(parts) < 3
        or parts[0] != MEDIA_PREFIX
        or parts[1] != identity
        or any(p in ("..", ".") for p in parts)
        or path.startswith("/")
    ):
        raise AccessDeniedError(f"Access denied to {path}")


class BlobStore(Protocol):
    async def upload(self, path: str, data: bytes, content_type: str, identity: str) -> None: ...

    async def resolve_url(self, path: str, identity: str) -> str: ...


class LocalBlobStore:
    def __init__(self, base_dir: Path, signer: UrlSigner, base_url: str):
        self.root = base_dir / "blobs"
        self.signer = signer
        self.base_url = base_url.rstrip("/")

    def _object_path(self, path: str) -> Path:
        return self.root.joinpath(*PurePosixPath(path).parts)

    def _write(self, path: str, data: bytes, content_type: str) -> None:
        target = self._object_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        tmp = target.with_name(target.name + ".tmp")
        with tmp.open("wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(target)

        meta = {"content_type": stored_content_type(content_type), "size": len(data)}
        atomic_write_json(target.with_name(target.name + _META_SUFFIX), meta)

    async def upload(self, path: str, data: bytes, content_type: str, identity: str) -> None:
        check_scope(path, identity)
        await run_in_threadpool(self._write, path, data, content_type)

    async def resolve_url(self, path: str, identity: str) -> str:
        check_scope(path, identity)
        exists = await run_in_threadpool(self._object_path(path).is_file)
        if not exists:
            raise BlobNotFoundError(path)
        token = self.signer.sign(path)
        return f"{self.base_url}/{quote(path)}?token={token}"

    def open(self, path: str, token: str) -> tuple[Path, str]:
        """Return (file path, content type) for a signed media request."""
        self.signer.verify(path, token)
        target = self._object_path(path)
        if path.endswith(_META_SUFFIX) or not target.is_file():
            raise BlobNotFoundError(path)

        content_type = FALLBACK_CONTENT_TYPE
        meta = target.with_name(target.name + _META_SUFFIX)
        if meta.exists():
            content_type = json.loads(meta.read_text(encoding="utf-8")).get("content_type", content_type)
        return target, stored_content_type(content_type)
