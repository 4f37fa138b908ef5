# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real app through `create_app` with test settings
- Injects the per-test DB session and a filesystem image store in `tmp_path`
- Returns HTTP client fixtures for integration tests
"""

from pathlib import Path
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from mediaboard.core.config import Settings
from mediaboard.core.storage import FilesystemImageStore
from mediaboard.db.session import get_async_db
from mediaboard.main import create_app
from tests.fixtures.db import get_override_get_db


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(_env_file=None, IMAGES_DIR=str(tmp_path / "images"))


@pytest.fixture()
def images_dir(test_settings: Settings) -> Path:
    return test_settings.images_dir


@pytest.fixture()
def image_store(images_dir: Path) -> FilesystemImageStore:
    return FilesystemImageStore(images_dir, "/images")


@pytest.fixture()
async def app(db_session: AsyncSession, test_settings: Settings, image_store) -> FastAPI:
    """
    🧪 The production app wired to the test DB session and image store.
    """
    app = create_app(settings=test_settings, image_store=image_store)
    app.dependency_overrides[get_async_db] = get_override_get_db(db_session)
    return app


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """🌐 HTTP client for the test app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture()
async def lenient_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client that receives 500 responses instead of re-raised app exceptions."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
