from __future__ import annotations

from typing import Optional

import httpx

from notes_drive.config import Settings
from notes_drive.controller import NoteWorkflowController
from notes_drive.storage.blobs import BlobStore
from notes_drive.storage.http_records import HttpRecordStore
from notes_drive.storage.records import LocalRecordStore, RecordStore


class Sessions:
    """One workflow controller per signed-in identity, kept for the process lifetime."""

    def __init__(self, settings: Settings, blobs: BlobStore, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.blobs = blobs
        self.http_client = http_client
        self._controllers: dict[str, NoteWorkflowController] = {}
        self._tokens: dict[str, str] = {}

    def _records_for(self, user_id: str, token: str) -> RecordStore:
        if self.settings.record_store_url:
            return HttpRecordStore(self.settings.record_store_url, token, client=self.http_client)
        return LocalRecordStore(self.settings.data_dir, user_id)

    def get(self, user_id: str, token: str) -> NoteWorkflowController:
        ctl = self._controllers.get(user_id)
        if ctl is None:
            ctl = NoteWorkflowController(self._records_for(user_id, token), self.blobs, user_id)
            self._controllers[user_id] = ctl
        elif self.settings.record_store_url and self._tokens.get(user_id) != token:
            # remote store authenticates with the caller's latest token
            ctl.records = self._records_for(user_id, token)
        self._tokens[user_id] = token
        return ctl

    def drop(self, user_id: str) -> None:
        self._controllers.pop(user_id, None)
        self._tokens.pop(user_id, None)
