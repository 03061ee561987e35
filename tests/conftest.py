"""Test environment: settings are read at import time, so set them before accountkit is imported."""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-0123456789")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="accountkit-uploads-")
os.environ["ADMIN_SIGNUP_OPEN"] = "false"
