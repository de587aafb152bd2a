"""Shared fixtures: isolated SQLite database, temp upload dir and an API client per test."""

import shutil
import tempfile
import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.orm import sessionmaker

from fileshare.api.routes.files import get_blob_store
from fileshare.core.config import Settings, get_settings
from fileshare.core.database import build_engine, get_db
from fileshare.main import app
from fileshare.models import Base
from fileshare.services.storage import BlobStore

TEST_BUCKET = "fileshare-test-bucket"


def make_settings(**overrides: Any) -> Settings:
    """Settings with no S3 and no email unless overridden."""
    values: dict[str, Any] = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": SecretStr("test-secret"),
        "UPLOAD_DIR": tempfile.gettempdir(),
        "S3_BUCKET_NAME": None,
        "EMAIL_USER": None,
        "EMAIL_PASS": None,
        "PUBLIC_BASE_URL": None,
    }
    values.update(overrides)
    return Settings(**values)


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory schema per test; cheap bcrypt rounds."""

    def setUp(self) -> None:
        self.engine = build_engine("sqlite://")
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionLocal()
        rounds = patch("fileshare.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient wired to the test DB, settings and blob store."""

    settings_overrides: dict[str, Any] = {}

    def setUp(self) -> None:
        super().setUp()
        self.upload_dir = tempfile.mkdtemp(prefix="fileshare-uploads-")
        self.addCleanup(shutil.rmtree, self.upload_dir, ignore_errors=True)
        self.settings = make_settings(UPLOAD_DIR=self.upload_dir, **self.settings_overrides)
        self.s3 = MagicMock()
        self.store = BlobStore(self.settings, s3_client=self.s3)

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        app.dependency_overrides[get_blob_store] = lambda: self.store
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    def register(self, username: str, email: str, password: str) -> dict:
        resp = self.client.post(
            "/api/register",
            json={"username": username, "email": email, "password": password},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["user"]

    def login(self, username: str, password: str) -> dict[str, str]:
        """Log in and return Authorization headers."""
        resp = self.client.post("/api/login", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    def upload(self, headers: dict[str, str], name: str, content: bytes, content_type: str = "text/plain"):
        return self.client.post(
            "/api/upload",
            files={"file": (name, content, content_type)},
            headers=headers,
        )
