"""Test package. Points settings at in-memory SQLite before any fileshare module is imported."""

import os
import tempfile

os.environ.setdefault("APP_ENV", "dev")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPLOAD_DIR"] = os.path.join(tempfile.gettempdir(), "fileshare-test-uploads")
os.environ["S3_BUCKET_NAME"] = ""
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""
os.environ["PUBLIC_BASE_URL"] = ""
