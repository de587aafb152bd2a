"""Request/response schemas for file listing, upload, delete and sharing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

UNKNOWN_UPLOADER = "Unknown"


class FileOut(BaseModel):
    """File metadata as returned to clients. The local disk path is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    original_name: str
    filename: str
    mimetype: str
    size: int
    uploaded_by: int | None = None
    s3_bucket: str | None = None
    s3_key: str | None = None
    uploaded_at: datetime | None = None


class FileListItem(FileOut):
    """File metadata joined with the uploader's username."""

    uploaded_by_username: str = UNKNOWN_UPLOADER


class UploadResponse(BaseModel):
    message: str = "File uploaded successfully"
    file: FileOut


class MessageResponse(BaseModel):
    message: str


class ShareRequest(BaseModel):
    """Recipient and optional note for share-by-email."""

    email: EmailStr
    message: str | None = Field(default=None, max_length=2000)


class ShareResponse(BaseModel):
    """downloadLink is present only when the link was returned instead of emailed."""

    message: str
    download_link: str | None = Field(default=None, serialization_alias="downloadLink")
