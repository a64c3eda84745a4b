"""Pytest configuration and fixtures."""

import os
import tempfile

# The app creates its tables on import, so point it at a throwaway SQLite
# file before anything imports apps.shared.database
_db_dir = tempfile.mkdtemp()
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'blog.db')}"

import io
import json

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers

from apps.shared.database import Base, get_db
from apps.blog import storage
from apps.blog.main import app

BASE_URL = "/api/v1/blogs"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Store images under tmp_path instead of UPLOAD_DIR."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(storage, "UPLOAD_DIR", str(path))
    monkeypatch.setattr(storage, "UPLOAD_BASE_URL", "http://testserver/uploads/blog")
    return path


@pytest.fixture
def client(db_session, upload_dir):
    """Test client bound to the per-test database."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # Unexpected errors should come back as 500 envelopes, not be re-raised
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_upload(filename="cover.png", content=PNG_BYTES, content_type="image/png"):
    """UploadFile as FastAPI would hand it to the service."""
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def post_blog(client, payload, image=None):
    files = {"imageFile": image} if image else None
    return client.post(
        f"{BASE_URL}/create-blog",
        data={"blog": payload if isinstance(payload, str) else json.dumps(payload)},
        files=files,
    )


def put_blog(client, blog_id, payload, image=None):
    files = {"imageFile": image} if image else None
    return client.put(
        f"{BASE_URL}/update/{blog_id}",
        data={"blog": payload if isinstance(payload, str) else json.dumps(payload)},
        files=files,
    )
