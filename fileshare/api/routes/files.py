"""File endpoints: list, upload (admin), download, delete (admin) and share by email."""

import logging
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from fileshare.api.routes.auth import get_current_user, require_admin
from fileshare.core.config import Settings, get_settings
from fileshare.core.database import get_db
from fileshare.models import FileRecord
from fileshare.schemas.auth import CurrentUser
from fileshare.schemas.files import (
    UNKNOWN_UPLOADER,
    FileListItem,
    FileOut,
    MessageResponse,
    ShareRequest,
    ShareResponse,
    UploadResponse,
)
from fileshare.services import catalog
from fileshare.services.catalog import FileRecordNotFoundError
from fileshare.services.notifier import EmailDeliveryError, ShareOutcome, share_file
from fileshare.services.storage import BlobNotFoundError, BlobStore, StorageOutcome

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def get_blob_store(settings: Annotated[Settings, Depends(get_settings)]) -> BlobStore:
    """Dependency: blob store bound to the current settings; its S3 client is process-wide."""
    return BlobStore(settings)


def _get_record_or_404(db: Session, file_id: int) -> FileRecord:
    try:
        return catalog.get_file(db, file_id)
    except FileRecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e


def _content_disposition(filename: str) -> str:
    """attachment header; non-ASCII names use the RFC 5987 filename* form."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _download_link(request: Request, settings: Settings, file_id: int) -> str:
    path = request.app.url_path_for("download_file", file_id=str(file_id))
    if settings.PUBLIC_BASE_URL:
        return f"{settings.PUBLIC_BASE_URL}{path}"
    return str(request.url_for("download_file", file_id=str(file_id)))


@router.get("/files", response_model=list[FileListItem])
def list_files(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> list[FileListItem]:
    """All files, newest first, with the uploader's username."""
    items = []
    for record, username in catalog.list_files(db):
        item = FileListItem.model_validate(record)
        items.append(item.model_copy(update={"uploaded_by_username": username or UNKNOWN_UPLOADER}))
    return items


@router.post("/upload", response_model=UploadResponse, status_code=201)
def upload_file(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    file: Annotated[UploadFile | str | None, File()] = None,
) -> UploadResponse:
    """
    Store one file sent as multipart field `file`. Admin only.

    The upload succeeds once the local copy and catalog row exist. Mirroring to
    S3 is attempted afterwards and its failure does not fail the request.
    """
    # A text part named "file" arrives as str.
    if not isinstance(file, StarletteUploadFile) or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    content = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        logger.info("Rejected upload %r from %s: over size limit", file.filename, admin.username)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")

    content_type = file.content_type or DEFAULT_CONTENT_TYPE
    blob = store.write(content, content_type, file.filename)
    record = catalog.insert_file(
        db,
        FileRecord(
            original_name=file.filename,
            filename=blob.generated_name,
            file_path=blob.local_path,
            mimetype=content_type,
            size=len(content),
            uploaded_by=admin.id,
        ),
    )

    mirrored = store.mirror(blob.local_path, blob.generated_name, content_type)
    if mirrored.outcome == StorageOutcome.DONE:
        catalog.attach_remote_locator(db, record.id, mirrored.bucket, mirrored.key)
        db.refresh(record)

    logger.info(
        "Upload id=%s name=%r size=%s by %s (mirror: %s)",
        record.id,
        record.original_name,
        record.size,
        admin.username,
        mirrored.outcome.value,
    )
    return UploadResponse(file=FileOut.model_validate(record))


@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> Response:
    """Return the file bytes as an attachment. Any authenticated user may download any file."""
    record = _get_record_or_404(db, file_id)
    try:
        content = store.read(record)
    except BlobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return Response(
        content=content,
        media_type=record.mimetype,
        headers={"Content-Disposition": _content_disposition(record.original_name)},
    )


@router.delete("/files/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: int,
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
    admin: Annotated[CurrentUser, Depends(require_admin)],
) -> MessageResponse:
    """
    Delete a file. Admin only.

    Backend removals are best-effort and the catalog row is removed regardless,
    so a failed S3 delete can leave an orphaned object.
    """
    record = _get_record_or_404(db, file_id)
    removed = store.remove(record)
    catalog.delete_file(db, file_id)
    logger.info(
        "Deleted file id=%s by %s (local: %s, remote: %s)",
        file_id,
        admin.username,
        removed.local.value,
        removed.remote.value,
    )
    return MessageResponse(message="File deleted successfully")


@router.post(
    "/send-file/{file_id}",
    response_model=ShareResponse,
    response_model_exclude_none=True,
)
def send_file(
    file_id: int,
    body: ShareRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ShareResponse:
    """Email a download link for the file, or return the link if email is not configured."""
    record = _get_record_or_404(db, file_id)
    link = _download_link(request, settings, record.id)
    try:
        result = share_file(record, str(body.email), body.message, user.username, link, settings)
    except EmailDeliveryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e
    if result.outcome == ShareOutcome.SENT_VIA_EMAIL:
        return ShareResponse(message="File link sent successfully")
    return ShareResponse(
        message="Email not configured. Here is the download link:",
        download_link=result.download_link,
    )
