"""Tests for fileshare.services.catalog: inserts, locator updates, listing order and deletes."""

import unittest
from datetime import UTC, datetime, timedelta

from fileshare.models import FileRecord, User
from fileshare.models.user import UserRole
from fileshare.services import catalog
from fileshare.services.catalog import FileRecordNotFoundError
from tests.support import DatabaseTestCase


def _record(name: str = "hello.txt", uploaded_by: int | None = None, **kwargs: object) -> FileRecord:
    """Build a FileRecord with plausible storage fields."""
    defaults = {
        "filename": f"file-1700000000000-1-{name}",
        "file_path": f"/tmp/uploads/{name}",
        "mimetype": "text/plain",
        "size": 10,
    }
    defaults.update(kwargs)
    return FileRecord(original_name=name, uploaded_by=uploaded_by, **defaults)


class TestCatalog(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = User(username="alice", email="a@x.com", password_hash="x", role=UserRole.ADMIN)
        self.db.add(self.alice)
        self.db.commit()

    def test_insert_assigns_id_and_timestamp(self) -> None:
        record = catalog.insert_file(self.db, _record(uploaded_by=self.alice.id))
        self.assertIsNotNone(record.id)
        self.assertIsNotNone(record.uploaded_at)
        self.assertFalse(record.has_remote_locator)

    def test_attach_remote_locator_is_idempotent(self) -> None:
        record = catalog.insert_file(self.db, _record(uploaded_by=self.alice.id))
        catalog.attach_remote_locator(self.db, record.id, "bucket", "files/x.txt")
        catalog.attach_remote_locator(self.db, record.id, "bucket", "files/x.txt")
        fetched = catalog.get_file(self.db, record.id)
        self.assertEqual(fetched.s3_bucket, "bucket")
        self.assertEqual(fetched.s3_key, "files/x.txt")
        self.assertTrue(fetched.has_remote_locator)

    def test_list_is_newest_first_with_username(self) -> None:
        now = datetime.now(UTC)
        older = _record("old.txt", uploaded_by=self.alice.id, filename="a", uploaded_at=now - timedelta(hours=1))
        newer = _record("new.txt", uploaded_by=self.alice.id, filename="b", uploaded_at=now)
        catalog.insert_file(self.db, older)
        catalog.insert_file(self.db, newer)
        rows = catalog.list_files(self.db)
        self.assertEqual([r.original_name for r, _ in rows], ["new.txt", "old.txt"])
        self.assertEqual([u for _, u in rows], ["alice", "alice"])

    def test_list_keeps_records_without_uploader(self) -> None:
        catalog.insert_file(self.db, _record("orphan.txt", uploaded_by=None))
        rows = catalog.list_files(self.db)
        self.assertEqual(len(rows), 1)
        self.assertIsNone(rows[0][1])

    def test_get_missing_raises(self) -> None:
        with self.assertRaises(FileRecordNotFoundError) as ctx:
            catalog.get_file(self.db, 999)
        self.assertEqual(ctx.exception.file_id, 999)

    def test_delete_removes_row(self) -> None:
        record = catalog.insert_file(self.db, _record(uploaded_by=self.alice.id))
        catalog.delete_file(self.db, record.id)
        self.assertEqual(catalog.list_files(self.db), [])


if __name__ == "__main__":
    unittest.main()
