from pathlib import Path

import pytest

from notes_drive.config import DEFAULT_DATA_DIR, Settings


def test_from_env_defaults(monkeypatch):
    for name in ["APP_DATA_DIR", "JWT_SECRET", "JWT_EXP_MINUTES", "BCRYPT_ROUNDS", "RECORD_STORE_URL",
                 "MEDIA_URL_TTL_SECONDS", "PUBLIC_BASE_URL"]:
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.data_dir == DEFAULT_DATA_DIR
    assert s.jwt_exp_minutes == 15
    assert s.bcrypt_rounds is None
    assert s.record_store_url is None
    assert s.media_url_ttl_seconds == 900
    with pytest.raises(RuntimeError):
        s.require_secret()


def test_from_env_reads_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("JWT_SECRET", "s3")
    monkeypatch.setenv("JWT_EXP_MINUTES", "not-a-number")
    monkeypatch.setenv("BCRYPT_ROUNDS", "5")
    monkeypatch.setenv("RECORD_STORE_URL", "https://records.test")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://notes.example/")

    s = Settings.from_env()

    assert s.data_dir == Path(tmp_path)
    assert s.require_secret() == "s3"
    assert s.jwt_exp_minutes == 15
    assert s.bcrypt_rounds == 5
    assert s.record_store_url == "https://records.test"
    assert s.public_base_url == "https://notes.example"
