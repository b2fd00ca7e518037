import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.security import create_session_token
from app.db.session import get_store
from app.db.store import MemoryStore
from app.main import app
from app.repositories.users import UserRepository


@pytest.fixture()
def store():
    store = MemoryStore()
    store.initialize()
    yield store
    store.close()


@pytest.fixture()
def storage_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCAL_STORAGE", "1")
    monkeypatch.setenv("LOCAL_STORAGE_DIR", str(tmp_path / "storage"))
    return tmp_path / "storage"


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def sign_in(client, store, open_id="test-user-123", role="admin", name="Test User"):
    users = UserRepository(store)
    users.upsert({"open_id": open_id, "name": name, "email": "test@example.com", "role": role})
    client.cookies.set(settings.SESSION_COOKIE_NAME, create_session_token(open_id, name))
    return users.get_by_open_id(open_id)


@pytest.fixture()
def auth_client(client, store):
    sign_in(client, store)
    return client
