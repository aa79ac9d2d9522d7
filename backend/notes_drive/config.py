from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# repository_root/data (we are in backend/notes_drive/)
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_exp_minutes: int = 15
    bcrypt_rounds: Optional[int] = None
    media_url_ttl_seconds: int = 900
    public_base_url: str = "http://testserver"
    record_store_url: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        rounds = os.getenv("BCRYPT_ROUNDS")
        try:
            bcrypt_rounds = int(rounds) if rounds else None
        except ValueError:
            bcrypt_rounds = None

        return cls(
            data_dir=Path(os.getenv("APP_DATA_DIR", str(DEFAULT_DATA_DIR))),
            jwt_secret=os.getenv("JWT_SECRET", ""),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_exp_minutes=_int_env("JWT_EXP_MINUTES", 15),
            bcrypt_rounds=bcrypt_rounds,
            media_url_ttl_seconds=_int_env("MEDIA_URL_TTL_SECONDS", 900),
            public_base_url=os.getenv("PUBLIC_BASE_URL", "http://testserver").rstrip("/"),
            record_store_url=os.getenv("RECORD_STORE_URL") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def require_secret(self) -> str:
        if not self.jwt_secret:
            # set JWT_SECRET in env for dev/tests; mandatory in prod
            raise RuntimeError("JWT_SECRET is not set")
        return self.jwt_secret
