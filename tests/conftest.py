# tests/conftest.py
"""
Global test bootstrap
- Makes SlowAPI rate-limiting test-friendly (bypass by default)
- Points import-time settings at throwaway locations (SQLite, temp image dir)
- Keeps everything isolated per test run (namespace)
- Exposes an opt-in ratelimit_on fixture
"""

from __future__ import annotations

import os
import random
import tempfile

import pytest

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set BEFORE importing the app/fixtures so it takes effect)
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("RATELIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")             # keep middleware behavior
os.environ.setdefault("RATE_LIMIT_TEST_BYPASS", "1")            # bypass limits unless a test disables it
os.environ.setdefault("RATE_LIMIT_NAMESPACE", f"pytest-{random.getrandbits(32)}")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("IMAGES_DIR", tempfile.mkdtemp(prefix="mediaboard-images-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
for _name in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY", "S3_SECRET_KEY", "S3_PUBLIC_BASE_URL"):
    os.environ.pop(_name, None)

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Pull in the rest of the fixtures (db, app, images)
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *          # noqa: F401,F403,E402
from tests.fixtures.app import *         # noqa: F401,F403,E402
from tests.fixtures.images import *      # noqa: F401,F403,E402


# ──────────────────────────────────────────────────────────────────────────────
# 🚦 Opt-in fixture to actually enforce rate limits in a specific test
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def ratelimit_on(monkeypatch):
    """Temporarily enable rate limiting for tests that assert 429s."""
    from mediaboard.core.limiter import limiter

    monkeypatch.setenv("RATE_LIMIT_TEST_BYPASS", "0")
    limiter.reset()
    yield
    limiter.reset()
