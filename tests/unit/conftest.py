import io
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SESSION_SECRET", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from app import create_app
from models import db

PASSWORD = "secret123!"


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'unit.db'}",
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "BCRYPT_ROUNDS": 4,
            "PEPPER": "test-pepper",
            "GOOGLE_CLIENT_ID": None,
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def register(client, username="alice@example.com", password=PASSWORD, **overrides):
    data = {
        "nama": "Alice",
        "username": username,
        "password": password,
        "posisi": "Designer",
        "gambar": (io.BytesIO(b"fake-image-bytes"), "avatar.png"),
    }
    data.update(overrides)
    data = {key: value for key, value in data.items() if value is not None}
    return client.post("/api/register", data=data, content_type="multipart/form-data")


def login(client, username="alice@example.com", password=PASSWORD):
    return client.post("/api/login", json={"username": username, "password": password})


@pytest.fixture()
def logged_in_client(client):
    assert register(client).status_code == 201
    assert login(client).status_code == 200
    return client
