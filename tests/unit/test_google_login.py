import pytest

from conftest import register
from models import DEFAULT_RATING, User, db
from routes import auth_routes
from services import photos
from services.accounts import AuthMethod, OAuthProfile, authenticate

PROFILE = OAuthProfile(
    external_id="google-42",
    email="alice@example.com",
    display_name="Alice Google",
    photo_url="https://lh3.example.com/photo.jpg",
)


@pytest.fixture()
def photo_bytes(monkeypatch):
    fetched = {"content": b"photo-v1", "calls": 0}

    def fake_fetch(url):
        fetched["calls"] += 1
        return fetched["content"]

    monkeypatch.setattr(photos, "fetch_profile_photo", fake_fetch)
    return fetched


def test_first_google_login_creates_user(app, photo_bytes):
    with app.app_context():
        user = authenticate(AuthMethod.GOOGLE, PROFILE)
        assert user.google_id == "google-42"
        assert user.username == "alice@example.com"
        assert user.nama == "Alice Google"
        assert user.password is None
        assert user.posisi == "User"
        assert user.penilaian == DEFAULT_RATING
        assert user.gambar.startswith("uploads/google-42_")
        assert "lh3.example.com" not in user.gambar
        assert photos.local_path(user.gambar).read_bytes() == b"photo-v1"


def test_google_login_links_existing_local_account(app, client, photo_bytes):
    register(client)
    with app.app_context():
        original = User.query.filter_by(username="alice@example.com").one()
        original_id, original_image = original.id, original.gambar

        user = authenticate(AuthMethod.GOOGLE, PROFILE)
        assert user.id == original_id
        assert user.google_id == "google-42"
        assert user.gambar != original_image
        assert user.nama == "Alice"
        assert User.query.count() == 1


def test_repeat_login_with_same_photo_does_not_rewrite_image(app, photo_bytes):
    with app.app_context():
        first = authenticate(AuthMethod.GOOGLE, PROFILE).gambar
        files_before = sorted(p.name for p in photos.upload_dir().iterdir())

        second = authenticate(AuthMethod.GOOGLE, PROFILE).gambar
        assert second == first
        assert sorted(p.name for p in photos.upload_dir().iterdir()) == files_before


def test_changed_photo_refreshes_image(app, photo_bytes):
    with app.app_context():
        first = authenticate(AuthMethod.GOOGLE, PROFILE).gambar
        photo_bytes["content"] = b"photo-v2"
        user = authenticate(AuthMethod.GOOGLE, PROFILE)
        assert user.gambar != first
        assert photos.local_path(user.gambar).read_bytes() == b"photo-v2"


def test_failed_write_discards_downloaded_photo(app, photo_bytes, monkeypatch):
    def broken_commit():
        raise RuntimeError("database unavailable")

    with app.app_context():
        monkeypatch.setattr(db.session, "commit", broken_commit)
        with pytest.raises(RuntimeError):
            authenticate(AuthMethod.GOOGLE, PROFILE)
        assert list(photos.upload_dir().iterdir()) == []


class FakeGoogleClient:
    def __init__(self, userinfo=None, error=None):
        self.userinfo_data = userinfo
        self.error = error

    def authorize_access_token(self):
        if self.error:
            raise self.error
        return {"access_token": "token", "userinfo": self.userinfo_data}


def test_callback_logs_user_in_and_redirects(app, client, photo_bytes, monkeypatch):
    userinfo = {"sub": "google-42", "email": "alice@example.com", "name": "Alice", "picture": "https://x/p.jpg"}
    monkeypatch.setattr(auth_routes, "_google_client", lambda: FakeGoogleClient(userinfo))

    response = client.get("/api/auth/google/callback?code=abc&state=xyz")
    assert response.status_code == 302
    assert response.headers["Location"] == app.config["OAUTH_SUCCESS_REDIRECT"]

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.get_json()["data"]["google_id"] == "google-42"


def test_callback_failure_redirects_to_login_page(app, client, monkeypatch):
    monkeypatch.setattr(auth_routes, "_google_client", lambda: FakeGoogleClient(error=ValueError("state mismatch")))

    response = client.get("/api/auth/google/callback?code=abc&state=xyz")
    assert response.status_code == 302
    assert response.headers["Location"] == app.config["OAUTH_FAILURE_REDIRECT"]
    assert client.get("/api/user").status_code == 401


def test_profile_photos_saved_in_the_same_millisecond_do_not_overwrite(app, monkeypatch):
    monkeypatch.setattr(photos, "_timestamp_ms", lambda: 1700000000000)
    with app.app_context():
        first = photos.store_profile_photo("google-42", b"photo-v1")
        second = photos.store_profile_photo("google-42", b"photo-v2")
        assert first != second
        assert photos.local_path(first).read_bytes() == b"photo-v1"
        assert photos.local_path(second).read_bytes() == b"photo-v2"
