"""SQLAlchemy ORM models."""

from fileshare.models.base import Base
from fileshare.models.file_record import FileRecord
from fileshare.models.user import User, UserRole

__all__ = ["Base", "FileRecord", "User", "UserRole"]
