from __future__ import annotations

import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from notes_drive.config import Settings
from notes_drive.errors import AuthError
from notes_drive.storage.users_store import UserRecord, UsersStore
from notes_drive.utils.passwords import PasswordHasher

bearer = HTTPBearer(auto_error=False)


class Identity:
    """Identity provider: registration, login and bearer-token sessions."""

    def __init__(self, settings: Settings, users: UsersStore, hasher: PasswordHasher):
        self.settings = settings
        self.users = users
        self.hasher = hasher
        # jti -> exp (epoch seconds) of signed-out tokens
        self._revoked: dict[str, int] = {}

    def register(self, user_id: str, password: str) -> UserRecord:
        if self.users.get(user_id) is not None:
            raise FileExistsError("User exists")
        # never store plaintext
        return self.users.create(user_id, self.hasher.hash(password))

    def login(self, user_id: str, password: str) -> str:
        rec = self.users.get(user_id)
        if rec is None or not self.hasher.verify(password, rec.hashed_password):
            raise AuthError("Invalid credentials")
        return self.create_access_token(rec.user_id)

    def create_access_token(self, subject: str) -> str:
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self.settings.jwt_exp_minutes)
        payload = {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.settings.require_secret(), algorithm=self.settings.jwt_algorithm)

    def decode_token(self, token: str) -> dict:
        try:
            payload = jwt.decode(token, self.settings.require_secret(), algorithms=[self.settings.jwt_algorithm])
        except JWTError:
            raise AuthError("Invalid or expired token")
        if not payload.get("sub"):
            raise AuthError("Invalid token")
        if payload.get("jti") in self._revoked:
            raise AuthError("Token has been revoked")
        return payload

    def current_user(self, token: str) -> str:
        return str(self.decode_token(token)["sub"])

    def sign_out(self, token: str) -> str:
        payload = self.decode_token(token)
        self._purge_revoked()
        self._revoked[payload["jti"]] = int(payload.get("exp", 0))
        return str(payload["sub"])

    def _purge_revoked(self) -> None:
        now = int(time.time())
        for jti in [j for j, exp in self._revoked.items() if exp <= now]:
            del self._revoked[jti]


def get_token(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> str:
    if creds is None or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing credentials")
    return creds.credentials


def get_current_user(request: Request, token: str = Depends(get_token)) -> str:
    identity: Identity = request.app.state.identity
    try:
        return identity.current_user(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
