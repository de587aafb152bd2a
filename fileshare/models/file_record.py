"""ORM model for uploaded file metadata."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, func

from fileshare.models.base import Base


class FileRecord(Base):
    """
    Metadata for one uploaded blob.

    file_path always points at the local copy written at upload time.
    s3_bucket/s3_key are set together, and only after a successful mirror;
    nothing keeps them in sync with the local copy afterwards.
    """

    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    original_name = Column(String(1024), nullable=False)
    filename = Column(String(255), nullable=False, unique=True)
    file_path = Column(String(2048), nullable=False)
    mimetype = Column(String(255), nullable=False, default="application/octet-stream")
    size = Column(BigInteger, nullable=False)
    uploaded_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    s3_bucket = Column(String(255), nullable=True)
    s3_key = Column(String(1024), nullable=True)
    uploaded_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    @property
    def has_remote_locator(self) -> bool:
        return bool(self.s3_bucket and self.s3_key)
