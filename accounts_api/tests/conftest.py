from __future__ import annotations

import os
import tempfile

# Settings are read once per process, so the test environment must be in
# place before anything imports the application modules.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("MAIL_BACKEND", "log")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "accounts_api_tests.log"))
