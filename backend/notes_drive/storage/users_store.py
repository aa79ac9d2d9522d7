from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from notes_drive.storage.records import atomic_write_json, safe_user_dir


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    hashed_password: str
    created_at: str


class UsersStore:
    def __init__(self, base_dir: Path):
        self.base_dir = base_dir

    def _user_path(self, user_id: str) -> Path:
        return safe_user_dir(self.base_dir, user_id) / "user.json"

    def get(self, user_id: str) -> Optional[UserRecord]:
        p = self._user_path(user_id)
        if not p.exists():
            return None
        raw = json.loads(p.read_text(encoding="utf-8"))
        return UserRecord(
            user_id=raw["user_id"],
            hashed_password=raw["hashed_password"],
            created_at=raw["created_at"],
        )

    def create(self, user_id: str, hashed_password: str) -> UserRecord:
        p = self._user_path(user_id)
        if p.exists():
            raise FileExistsError("User exists")

        rec = UserRecord(
            user_id=user_id,
            hashed_password=hashed_password,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

        atomic_write_json(p, asdict(rec))
        return rec
