"""Upload endpoint: admin-only multipart file upload returning opaque file URLs."""

import logging
import re
import uuid
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from portal.api.deps import get_admin_account, get_app_settings
from portal.core.config import Settings
from portal.schemas.accounts import Account
from portal.schemas.upload import UploadResponse

logger = logging.getLogger(__name__)
router = APIRouter()

UPLOADS_URL_PREFIX = "/uploads"
FILES_FIELD = "files"
# Extensions kept on stored names; anything else is stored without one.
_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def _is_upload_file(obj: object) -> bool:
    """True if obj is an uploaded file (UploadFile or file-like with filename and read)."""
    if isinstance(obj, UploadFile):
        return True
    return (
        hasattr(obj, "read")
        and callable(getattr(obj, "read", None))
        and hasattr(obj, "filename")
    )


def _stored_name(original_filename: str) -> str:
    """Unique on-disk name; the client's filename contributes only a sanitized extension."""
    suffix = Path(original_filename or "").suffix
    if not _SAFE_SUFFIX.match(suffix):
        suffix = ""
    return f"{FILES_FIELD}-{uuid.uuid4().hex}{suffix.lower()}"


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_files(
    request: Request,
    admin: Annotated[Account, Depends(get_admin_account)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UploadResponse:
    """
    Store up to UPLOAD_MAX_FILES files sent as multipart/form-data under the
    `files` field and return a URL for each, in upload order.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != "multipart/form-data":
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Content-Type must be multipart/form-data.",
        )
    form = await request.form()
    files = [f for f in form.getlist(FILES_FIELD) if _is_upload_file(f)]
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"No files selected; send them under the '{FILES_FIELD}' field.",
        )
    if len(files) > settings.UPLOAD_MAX_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.UPLOAD_MAX_FILES} files per request.",
        )

    upload_dir = Path(settings.UPLOAD_DIR)
    await run_in_threadpool(upload_dir.mkdir, parents=True, exist_ok=True)

    pending: list[tuple[Path, bytes]] = []
    for file in files:
        content = await file.read()
        if len(content) > settings.UPLOAD_MAX_FILE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File size must not exceed {settings.UPLOAD_MAX_FILE_BYTES} bytes.",
            )
        pending.append((upload_dir / _stored_name(getattr(file, "filename", "") or ""), content))

    urls: list[str] = []
    for path, content in pending:
        await run_in_threadpool(path.write_bytes, content)
        urls.append(f"{UPLOADS_URL_PREFIX}/{path.name}")

    logger.info("Files uploaded", extra={"account_id": admin.id, "file_count": len(urls)})
    return UploadResponse(files=urls, message="Files uploaded.")
