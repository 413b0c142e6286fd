import os

os.environ["DEBUG"] = "1"
os.environ["DEBUG_DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["GEMINI_BASE_URL"] = "https://gemini.test/v1beta"
os.environ["GROQ_API"] = ""

import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db, get_session_factory
from app.main import app
from app.models.models import User
from app.utils.auth import auth_dependency
from app.utils.http import get_http_client
from app.utils.storage import FileStorage, get_file_storage


class MockUpstream:
    """Routes outbound requests to a handler chosen by each test."""

    def __init__(self):
        self.requests = []
        self.handler = lambda request: httpx.Response(404, text="no handler")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def sse_body(*payloads) -> bytes:
    return "".join(f"data: {json.dumps(p)}\n\n" for p in payloads).encode()


@pytest.fixture
def sse():
    return sse_body


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user(db):
    user = User(id="user-1", email="owner@example.com", first_name="Noura")
    db.add(user)
    db.commit()
    db.refresh(user)
    db.expunge(user)
    return user


@pytest.fixture
def upstream():
    return MockUpstream()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def storage(tmp_path):
    return FileStorage(upload_dir=str(tmp_path), debug=True)


@pytest.fixture
def anon_client(session_factory, http_client, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_file_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client, user):
    app.dependency_overrides[auth_dependency] = lambda: user
    return anon_client
