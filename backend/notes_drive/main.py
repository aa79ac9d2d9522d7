"""FastAPI application for Notes Drive.

``create_app`` wires the collaborators explicitly from a ``Settings`` object so
tests (and alternative deployments) can build isolated instances; ``app`` is
the default instance configured from the environment.
"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from notes_drive.api import auth, media, notes
from notes_drive.config import Settings
from notes_drive.logging_setup import configure_logging
from notes_drive.sessions import Sessions
from notes_drive.storage.blobs import LocalBlobStore
from notes_drive.storage.event_log import EventLog
from notes_drive.storage.users_store import UsersStore
from notes_drive.utils.jwt_auth import Identity
from notes_drive.utils.passwords import PasswordHasher
from notes_drive.utils.url_signing import UrlSigner


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logger = configure_logging(settings.log_level)

    app = FastAPI(title="Notes Drive API")

    blobs = LocalBlobStore(settings.data_dir, UrlSigner(settings), settings.public_base_url)
    app.state.settings = settings
    app.state.blobs = blobs
    app.state.event_log = EventLog(settings.data_dir)
    app.state.identity = Identity(settings, UsersStore(settings.data_dir), PasswordHasher(settings.bcrypt_rounds))
    app.state.sessions = Sessions(settings, blobs)

    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(media.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    logger.info(
        "Notes Drive configured: data_dir=%s record_store=%s",
        settings.data_dir,
        settings.record_store_url or "local",
    )
    return app


app = create_app()
