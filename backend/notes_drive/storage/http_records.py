from __future__ import annotations

from typing import Any, Optional

import httpx

from notes_drive.errors import NoteNotFoundError, RecordStoreError
from notes_drive.storage.records import Note, RecordResult


def _errors_from(payload: dict[str, Any]) -> list[str]:
    out = []
    for e in payload.get("errors") or []:
        out.append(e.get("message", str(e)) if isinstance(e, dict) else str(e))
    return out


class HttpRecordStore:
    """Record store backed by a remote data API.

    Responses are envelopes of the form ``{"data": ..., "errors": [...]}``.
    The bearer token identifies the current user to the remote side.
    """

    def __init__(self, base_url: str, token: str, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}
        self._client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=self._headers, **kwargs)
            async with httpx.AsyncClient() as client:
                return await client.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise RecordStoreError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _envelope(resp: httpx.Response) -> dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError:
            raise RecordStoreError(f"Invalid JSON from record store (HTTP {resp.status_code})")
        if not isinstance(payload, dict):
            raise RecordStoreError("Expected a JSON object from record store")
        # a 4xx/5xx is only tolerated when it still carries data
        if resp.is_error and payload.get("data") is None:
            detail = "; ".join(_errors_from(payload)) or resp.reason_phrase
            raise RecordStoreError(f"Record store error (HTTP {resp.status_code}): {detail}")
        return payload

    async def list(self) -> RecordResult[list[Note]]:
        payload = self._envelope(await self._request("GET", "/notes"))
        errors = _errors_from(payload)
        notes = []
        for raw in payload.get("data") or []:
            try:
                notes.append(Note.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as exc:
                errors.append(f"Malformed note record: {exc!r}")
        return RecordResult(data=notes, errors=errors)

    async def create(self, fields: dict[str, Any]) -> RecordResult[Optional[Note]]:
        payload = self._envelope(await self._request("POST", "/notes", json=fields))
        errors = _errors_from(payload)
        raw = payload.get("data")
        note = None
        if raw:
            try:
                note = Note.from_dict(raw)
            except (KeyError, TypeError, AttributeError) as exc:
                errors.append(f"Malformed created note: {exc!r}")
        return RecordResult(data=note, errors=errors)

    async def delete(self, note_id: str) -> None:
        resp = await self._request("DELETE", f"/notes/{note_id}")
        if resp.status_code == 404:
            raise NoteNotFoundError(note_id)
        if resp.is_error:
            raise RecordStoreError(f"Delete failed (HTTP {resp.status_code})")
