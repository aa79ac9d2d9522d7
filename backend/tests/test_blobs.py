import asyncio
import threading
from dataclasses import replace
from urllib.parse import parse_qs, urlparse

import pytest

from notes_drive.errors import AccessDeniedError, BlobNotFoundError
from notes_drive.storage.blobs import LocalBlobStore, check_scope
from notes_drive.utils.url_signing import UrlSigner


@pytest.fixture()
def blobs(settings):
    return LocalBlobStore(settings.data_dir, UrlSigner(settings), "http://testserver")


def _token(url: str) -> str:
    return parse_qs(urlparse(url).query)["token"][0]


def test_upload_then_resolve_signed_url(blobs):
    asyncio.run(blobs.upload("media/userA/1_cat.png", b"\x89PNG", "image/png", "userA"))

    url = asyncio.run(blobs.resolve_url("media/userA/1_cat.png", "userA"))

    assert url.startswith("http://testserver/media/userA/1_cat.png?token=")
    target, content_type = blobs.open("media/userA/1_cat.png", _token(url))
    assert target.read_bytes() == b"\x89PNG"
    assert content_type == "image/png"


def test_resolve_missing_object_fails(blobs):
    with pytest.raises(BlobNotFoundError):
        asyncio.run(blobs.resolve_url("media/userA/nope.png", "userA"))


@pytest.mark.parametrize("path", [
    "media/userB/1_cat.png",
    "media/userA",
    "public/notes/1_cat.png",
    "media/userA/../userB/x.png",
    "/media/userA/x.png",
])
def test_paths_outside_identity_prefix_are_denied(blobs, path):
    with pytest.raises(AccessDeniedError):
        asyncio.run(blobs.upload(path, b"x", "image/png", "userA"))
    with pytest.raises(AccessDeniedError):
        asyncio.run(blobs.resolve_url(path, "userA"))


def test_token_is_bound_to_one_object(blobs):
    asyncio.run(blobs.upload("media/userA/a.png", b"a", "image/png", "userA"))
    asyncio.run(blobs.upload("media/userA/b.png", b"b", "image/png", "userA"))
    url_a = asyncio.run(blobs.resolve_url("media/userA/a.png", "userA"))

    with pytest.raises(AccessDeniedError):
        blobs.open("media/userA/b.png", _token(url_a))


def test_expired_token_is_rejected(settings):
    expired = UrlSigner(replace(settings, media_url_ttl_seconds=-30))
    store = LocalBlobStore(settings.data_dir, expired, "http://testserver")
    asyncio.run(store.upload("media/userA/a.png", b"a", "image/png", "userA"))
    url = asyncio.run(store.resolve_url("media/userA/a.png", "userA"))

    with pytest.raises(AccessDeniedError):
        store.open("media/userA/a.png", _token(url))


def test_garbage_token_is_rejected(blobs):
    asyncio.run(blobs.upload("media/userA/a.png", b"a", "image/png", "userA"))
    with pytest.raises(AccessDeniedError):
        blobs.open("media/userA/a.png", "not-a-jwt")


def test_check_scope_accepts_nested_names():
    check_scope("media/userA/2024/1_cat.png", "userA")


@pytest.mark.parametrize("declared, stored", [
    ("image/png", "image/png"),
    ("IMAGE/JPEG; charset=binary", "image/jpeg"),
    ("text/html", "application/octet-stream"),
    ("image/svg+xml", "application/octet-stream"),
    ("", "application/octet-stream"),
])
def test_only_raster_image_types_are_kept(blobs, declared, stored):
    asyncio.run(blobs.upload("media/userA/x.bin", b"<script>", declared, "userA"))
    url = asyncio.run(blobs.resolve_url("media/userA/x.bin", "userA"))

    _, content_type = blobs.open("media/userA/x.bin", _token(url))

    assert content_type == stored


def test_file_io_runs_off_the_event_loop_thread(blobs, monkeypatch):
    loop_thread = threading.get_ident()
    seen = []
    original = LocalBlobStore._write

    def spy(self, *args):
        seen.append(threading.get_ident())
        return original(self, *args)

    monkeypatch.setattr(LocalBlobStore, "_write", spy)
    asyncio.run(blobs.upload("media/userA/a.png", b"a", "image/png", "userA"))

    assert seen and seen[0] != loop_thread
