from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import FileResponse

from notes_drive.errors import AccessDeniedError, BlobNotFoundError
from notes_drive.storage.blobs import MEDIA_PREFIX

router = APIRouter(prefix=f"/{MEDIA_PREFIX}", tags=["media"])


@router.get("/{path:path}")
def get_media(path: str, request: Request, token: str = Query(...)) -> FileResponse:
    """Serve an object behind a signed, time-limited display URL."""
    object_path = f"{MEDIA_PREFIX}/{path}"
    try:
        target, content_type = request.app.state.blobs.open(object_path, token)
    except AccessDeniedError:
        # bad, expired or mismatched token; do not reveal whether the object exists
        raise HTTPException(status_code=403, detail="Forbidden")
    except BlobNotFoundError:
        raise HTTPException(status_code=404, detail="Not found")
    disposition = "inline" if content_type.startswith("image/") else "attachment"
    return FileResponse(
        target,
        media_type=content_type,
        filename=target.name,
        content_disposition_type=disposition,
        headers={"X-Content-Type-Options": "nosniff"},
    )
