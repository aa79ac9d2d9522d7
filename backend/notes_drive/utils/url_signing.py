from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from notes_drive.config import Settings
from notes_drive.errors import AccessDeniedError

_MEDIA_AUDIENCE = "media"


class UrlSigner:
    """Issues and checks short-lived tokens that grant read access to one object path."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def sign(self, path: str) -> str:
        now = datetime.now(timezone.utc)
        exp = now + timedelta(seconds=self.settings.media_url_ttl_seconds)
        payload = {
            "sub": path,
            "aud": _MEDIA_AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self.settings.require_secret(), algorithm=self.settings.jwt_algorithm)

    def verify(self, path: str, token: str) -> None:
        try:
            payload = jwt.decode(
                token,
                self.settings.require_secret(),
                algorithms=[self.settings.jwt_algorithm],
                audience=_MEDIA_AUDIENCE,
            )
        except JWTError:
            raise AccessDeniedError("Invalid or expired media token")
        if payload.get("sub") != path:
            raise AccessDeniedError("Media token does not match object")
