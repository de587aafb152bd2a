"""
Blob storage: local disk (always) plus an optional best-effort S3 mirror.

The local write is the only step an upload depends on. Mirroring and remote
deletes are attempted when a bucket is configured; their failures are logged
and reported as StorageOutcome.FAILED, never raised.
"""

from __future__ import annotations

import enum
import logging
import secrets
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any

import boto3

if TYPE_CHECKING:
    from fileshare.core.config import Settings
    from fileshare.models import FileRecord

logger = logging.getLogger(__name__)

REMOTE_KEY_PREFIX = "files/"
GENERATED_NAME_PREFIX = "file"


class StorageOutcome(str, enum.Enum):
    """Result of a best-effort backend operation."""

    DONE = "done"
    SKIPPED = "skipped"  # backend not configured, or nothing to act on
    FAILED = "failed"  # error logged and suppressed


class BlobNotFoundError(Exception):
    """Raised when neither the remote nor the local backend yields the blob."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        self.message = "File not found on server"
        super().__init__(f"Blob {filename} not found in any backend")


@dataclass(frozen=True)
class StoredBlob:
    local_path: str
    generated_name: str


@dataclass(frozen=True)
class MirrorResult:
    outcome: StorageOutcome
    bucket: str | None = None
    key: str | None = None


@dataclass(frozen=True)
class RemovalResult:
    local: StorageOutcome
    remote: StorageOutcome


def generate_storage_name(suggested_name: str | None) -> str:
    """Timestamp + random component + the original extension; never the display name itself."""
    suffix = Path(suggested_name or "").suffix
    millis = int(time.time() * 1000)
    return f"{GENERATED_NAME_PREFIX}-{millis}-{secrets.randbelow(10**9)}{suffix}"


def remote_key_for(generated_name: str) -> str:
    return f"{REMOTE_KEY_PREFIX}{generated_name}"


@lru_cache(maxsize=8)
def _s3_client(region_name: str | None, endpoint_url: str | None) -> Any:
    return boto3.client("s3", region_name=region_name, endpoint_url=endpoint_url)


def build_s3_client(settings: Settings) -> Any:
    """
    boto3 S3 client using the default credential chain.

    One client per (region, endpoint) for the process; boto3 clients are
    thread-safe and keep their own connection pool.
    """
    return _s3_client(settings.AWS_REGION, settings.S3_ENDPOINT_URL)


class BlobStore:
    """Reads, writes and removes blob bytes across the local and remote backends."""

    def __init__(self, settings: Settings, s3_client: Any | None = None) -> None:
        self.upload_dir = Path(settings.UPLOAD_DIR)
        self.bucket = settings.S3_BUCKET_NAME
        self._settings = settings
        self._s3 = s3_client

    @property
    def remote_enabled(self) -> bool:
        return bool(self.bucket)

    @property
    def s3(self) -> Any:
        if self._s3 is None:
            self._s3 = build_s3_client(self._settings)
        return self._s3

    def write(self, content: bytes, content_type: str, suggested_name: str | None) -> StoredBlob:
        """Write bytes under a generated name in the upload directory."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        generated_name = generate_storage_name(suggested_name)
        path = self.upload_dir / generated_name
        path.write_bytes(content)
        logger.info(
            "Stored blob %s (%s bytes, %s) locally", generated_name, len(content), content_type
        )
        return StoredBlob(local_path=str(path), generated_name=generated_name)

    def mirror(self, local_path: str, generated_name: str, content_type: str) -> MirrorResult:
        """Copy the local blob to the bucket under files/<generated_name>."""
        if not self.remote_enabled:
            return MirrorResult(StorageOutcome.SKIPPED)
        key = remote_key_for(generated_name)
        try:
            body = Path(local_path).read_bytes()
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except Exception:
            logger.exception("S3 mirror of %s to s3://%s/%s failed", local_path, self.bucket, key)
            return MirrorResult(StorageOutcome.FAILED)
        logger.info("Mirrored %s to s3://%s/%s", generated_name, self.bucket, key)
        return MirrorResult(StorageOutcome.DONE, bucket=self.bucket, key=key)

    def read(self, record: FileRecord) -> bytes:
        """Remote copy first when a locator is recorded, then the local file."""
        if record.has_remote_locator:
            try:
                obj = self.s3.get_object(Bucket=record.s3_bucket, Key=record.s3_key)
                return obj["Body"].read()
            except Exception:
                logger.exception(
                    "S3 download of s3://%s/%s failed; falling back to local copy",
                    record.s3_bucket,
                    record.s3_key,
                )
        path = Path(record.file_path)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise BlobNotFoundError(record.filename) from e

    def remove(self, record: FileRecord) -> RemovalResult:
        """Delete from both backends independently; failures are logged, not raised."""
        return RemovalResult(
            local=self._remove_local(record),
            remote=self._remove_remote(record),
        )

    def _remove_remote(self, record: FileRecord) -> StorageOutcome:
        if not record.has_remote_locator:
            return StorageOutcome.SKIPPED
        try:
            self.s3.delete_object(Bucket=record.s3_bucket, Key=record.s3_key)
        except Exception:
            logger.exception(
                "S3 delete of s3://%s/%s failed; object may be orphaned",
                record.s3_bucket,
                record.s3_key,
            )
            return StorageOutcome.FAILED
        return StorageOutcome.DONE

    def _remove_local(self, record: FileRecord) -> StorageOutcome:
        path = Path(record.file_path)
        try:
            path.unlink()
        except FileNotFoundError:
            return StorageOutcome.SKIPPED
        except OSError:
            logger.exception("Local delete of %s failed; file may be orphaned", path)
            return StorageOutcome.FAILED
        return StorageOutcome.DONE
