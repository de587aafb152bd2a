"""File metadata persistence: insert, locate, list and delete FileRecord rows."""

from sqlalchemy.orm import Session

from fileshare.models import FileRecord, User


class FileRecordNotFoundError(Exception):
    """Raised when no FileRecord exists for the requested id."""

    def __init__(self, file_id: int) -> None:
        self.file_id = file_id
        self.message = "File not found"
        super().__init__(f"File {file_id} not found")


def insert_file(db: Session, record: FileRecord) -> FileRecord:
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def attach_remote_locator(db: Session, file_id: int, bucket: str, key: str) -> None:
    """Record where the mirrored copy lives. Safe to call more than once."""
    db.query(FileRecord).filter(FileRecord.id == file_id).update(
        {FileRecord.s3_bucket: bucket, FileRecord.s3_key: key},
        synchronize_session="fetch",
    )
    db.commit()


def list_files(db: Session) -> list[tuple[FileRecord, str | None]]:
    """
    All records with the uploader's username, newest first.

    LEFT JOIN: records whose uploader no longer exists are returned with None.
    """
    rows = (
        db.query(FileRecord, User.username)
        .outerjoin(User, FileRecord.uploaded_by == User.id)
        .order_by(FileRecord.uploaded_at.desc(), FileRecord.id.desc())
        .all()
    )
    return [(record, username) for record, username in rows]


def get_file(db: Session, file_id: int) -> FileRecord:
    record = db.query(FileRecord).filter(FileRecord.id == file_id).first()
    if record is None:
        raise FileRecordNotFoundError(file_id)
    return record


def delete_file(db: Session, file_id: int) -> None:
    """Remove the row only. Blob removal is the caller's job."""
    db.query(FileRecord).filter(FileRecord.id == file_id).delete(synchronize_session=False)
    db.commit()
