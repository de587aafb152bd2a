"""Unit tests for fileshare.services.storage: local writes, S3 mirror outcomes, read fallback, removal."""

import io
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from fileshare.models import FileRecord
from fileshare.services.storage import (
    BlobNotFoundError,
    BlobStore,
    StorageOutcome,
    _s3_client,
    build_s3_client,
    generate_storage_name,
)
from tests.support import TEST_BUCKET, make_settings


class TestGenerateStorageName(unittest.TestCase):
    def test_keeps_extension_drops_display_name(self) -> None:
        name = generate_storage_name("quarterly report.pdf")
        self.assertRegex(name, r"^file-\d+-\d+\.pdf$")
        self.assertNotIn("quarterly", name)

    def test_no_extension(self) -> None:
        self.assertRegex(generate_storage_name("README"), r"^file-\d+-\d+$")

    def test_path_components_are_ignored(self) -> None:
        name = generate_storage_name("../../etc/passwd.txt")
        self.assertNotIn("/", name)
        self.assertTrue(name.endswith(".txt"))

    def test_names_are_distinct(self) -> None:
        names = {generate_storage_name("a.txt") for _ in range(200)}
        self.assertEqual(len(names), 200)


class TestBuildS3Client(unittest.TestCase):
    def setUp(self) -> None:
        _s3_client.cache_clear()
        self.addCleanup(_s3_client.cache_clear)

    @patch("fileshare.services.storage.boto3.client")
    def test_client_shared_across_blob_stores(self, client: MagicMock) -> None:
        settings = make_settings(S3_BUCKET_NAME=TEST_BUCKET, AWS_REGION="eu-west-1")
        first = BlobStore(settings).s3
        second = BlobStore(settings).s3
        self.assertIs(first, second)
        client.assert_called_once_with("s3", region_name="eu-west-1", endpoint_url=None)

    @patch("fileshare.services.storage.boto3.client")
    def test_distinct_endpoints_get_distinct_clients(self, client: MagicMock) -> None:
        client.side_effect = lambda *args, **kwargs: MagicMock()
        local = build_s3_client(make_settings(S3_ENDPOINT_URL="http://localhost:9000"))
        aws = build_s3_client(make_settings())
        self.assertIsNot(local, aws)
        self.assertEqual(client.call_count, 2)


class BlobStoreTestCase(unittest.TestCase):
    bucket: str | None = None

    def setUp(self) -> None:
        self.tmp = tempfile.mkdtemp(prefix="fileshare-blobs-")
        self.addCleanup(shutil.rmtree, self.tmp, ignore_errors=True)
        self.s3 = MagicMock()
        self.store = BlobStore(
            make_settings(UPLOAD_DIR=str(Path(self.tmp) / "uploads"), S3_BUCKET_NAME=self.bucket),
            s3_client=self.s3,
        )

    def _record_for(self, content: bytes, **kwargs: object) -> FileRecord:
        blob = self.store.write(content, "text/plain", "hello.txt")
        return FileRecord(
            original_name="hello.txt",
            filename=blob.generated_name,
            file_path=blob.local_path,
            mimetype="text/plain",
            size=len(content),
            **kwargs,
        )


class TestBlobStoreLocalOnly(BlobStoreTestCase):
    def test_write_creates_directory_and_file(self) -> None:
        blob = self.store.write(b"0123456789", "text/plain", "hello.txt")
        self.assertEqual(Path(blob.local_path).read_bytes(), b"0123456789")
        self.assertEqual(Path(blob.local_path).name, blob.generated_name)

    def test_mirror_skipped_without_bucket(self) -> None:
        blob = self.store.write(b"x", "text/plain", "hello.txt")
        result = self.store.mirror(blob.local_path, blob.generated_name, "text/plain")
        self.assertEqual(result.outcome, StorageOutcome.SKIPPED)
        self.assertIsNone(result.key)
        self.s3.put_object.assert_not_called()

    def test_read_local(self) -> None:
        record = self._record_for(b"local bytes")
        self.assertEqual(self.store.read(record), b"local bytes")
        self.s3.get_object.assert_not_called()

    def test_read_missing_everywhere_raises(self) -> None:
        record = self._record_for(b"gone")
        Path(record.file_path).unlink()
        with self.assertRaises(BlobNotFoundError):
            self.store.read(record)

    def test_remove_local_only(self) -> None:
        record = self._record_for(b"x")
        result = self.store.remove(record)
        self.assertEqual(result.local, StorageOutcome.DONE)
        self.assertEqual(result.remote, StorageOutcome.SKIPPED)
        self.assertFalse(Path(record.file_path).exists())

    def test_remove_already_missing_local(self) -> None:
        record = self._record_for(b"x")
        Path(record.file_path).unlink()
        self.assertEqual(self.store.remove(record).local, StorageOutcome.SKIPPED)


class TestBlobStoreWithMirror(BlobStoreTestCase):
    bucket = TEST_BUCKET

    def test_mirror_puts_object_under_files_prefix(self) -> None:
        blob = self.store.write(b"abc", "text/plain", "hello.txt")
        result = self.store.mirror(blob.local_path, blob.generated_name, "text/plain")
        self.assertEqual(result.outcome, StorageOutcome.DONE)
        self.assertEqual(result.bucket, TEST_BUCKET)
        self.assertEqual(result.key, f"files/{blob.generated_name}")
        self.s3.put_object.assert_called_once_with(
            Bucket=TEST_BUCKET, Key=result.key, Body=b"abc", ContentType="text/plain"
        )

    def test_mirror_failure_is_reported_not_raised(self) -> None:
        self.s3.put_object.side_effect = RuntimeError("network down")
        blob = self.store.write(b"abc", "text/plain", "hello.txt")
        with self.assertLogs("fileshare.services.storage", level="ERROR"):
            result = self.store.mirror(blob.local_path, blob.generated_name, "text/plain")
        self.assertEqual(result.outcome, StorageOutcome.FAILED)
        self.assertTrue(Path(blob.local_path).exists())

    def test_read_prefers_remote(self) -> None:
        record = self._record_for(b"local", s3_bucket=TEST_BUCKET, s3_key="files/x")
        self.s3.get_object.return_value = {"Body": io.BytesIO(b"remote")}
        self.assertEqual(self.store.read(record), b"remote")
        self.s3.get_object.assert_called_once_with(Bucket=TEST_BUCKET, Key="files/x")

    def test_read_falls_back_to_local_on_remote_error(self) -> None:
        record = self._record_for(b"local", s3_bucket=TEST_BUCKET, s3_key="files/x")
        self.s3.get_object.side_effect = RuntimeError("NoSuchKey")
        with self.assertLogs("fileshare.services.storage", level="ERROR"):
            self.assertEqual(self.store.read(record), b"local")

    def test_remote_delete_failure_does_not_block_local(self) -> None:
        record = self._record_for(b"x", s3_bucket=TEST_BUCKET, s3_key="files/x")
        self.s3.delete_object.side_effect = RuntimeError("AccessDenied")
        with self.assertLogs("fileshare.services.storage", level="ERROR"):
            result = self.store.remove(record)
        self.assertEqual(result.remote, StorageOutcome.FAILED)
        self.assertEqual(result.local, StorageOutcome.DONE)
        self.assertFalse(Path(record.file_path).exists())

    def test_remove_both(self) -> None:
        record = self._record_for(b"x", s3_bucket=TEST_BUCKET, s3_key="files/x")
        result = self.store.remove(record)
        self.assertEqual((result.local, result.remote), (StorageOutcome.DONE, StorageOutcome.DONE))
        self.s3.delete_object.assert_called_once_with(Bucket=TEST_BUCKET, Key="files/x")


if __name__ == "__main__":
    unittest.main()
