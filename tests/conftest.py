import os

# settings are read at import time
os.environ["DB_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["AUTH_DEMO"] = "false"
os.environ["APP_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient

from collabhub.main import app
from collabhub.auth.service import register_user
from collabhub.files.storage import UploadTarget, get_object_store, new_object_key
from collabhub.notifications.service import Notifier, get_notifier
from collabhub.shared.auth import Principal, create_access_token
from collabhub.shared.db import Base, SessionLocal, engine
from collabhub.shared.errors import UpstreamFailure


class FakeObjectStore:
    """In-memory stand-in for ObjectStore that records every call."""
    expires_in = 3600

    def __init__(self):
        self.objects = set()
        self.deleted = []
        self.fail_deletes = False

    def issue_upload_target(self, file_type, owner):
        key = new_object_key(file_type, owner)
        return UploadTarget(upload_url=f"https://bucket.example.com/{key}?sig=put", key=key)

    def issue_download_target(self, key):
        return f"https://bucket.example.com/{key}?sig=get"

    def delete_object(self, key):
        self.deleted.append(key)
        if self.fail_deletes:
            raise UpstreamFailure(f"could not delete object {key}", details="AccessDenied")
        self.objects.discard(key)

    def object_exists(self, key):
        return key in self.objects


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []
        self.attempts = []
        self.failing = set()

    async def send(self, to, subject, text, html):
        self.attempts.append(to)
        if to in self.failing:
            raise ConnectionError(f"smtp refused {to}")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


@pytest.fixture(autouse=True)
def _fresh_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

@pytest.fixture
def store():
    return FakeObjectStore()

@pytest.fixture
def notifier():
    return RecordingNotifier()

@pytest.fixture
def client(store, notifier):
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(db):
    """Register a user; returns (principal, auth headers)."""
    def _make(email: str, role: str = "user"):
        info = register_user(db, email, "correct-horse", role=role)
        principal = Principal(id=info["id"], email=info["email"], role=info["role"])
        token = create_access_token(sub=principal.id, role=principal.role)
        return principal, {"Authorization": f"Bearer {token}"}
    return _make

@pytest.fixture
def upload(client):
    """Create a file through the API; returns the response JSON."""
    def _upload(headers, name="q1.pdf", type="application/pdf", size=2_400_000, project_id=None):
        body = {"name": name, "type": type, "size": size}
        if project_id:
            body["project_id"] = project_id
        r = client.post("/files", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()
    return _upload
