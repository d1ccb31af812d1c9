import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


def _int_env(name, default):
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _bool_env(name, default=False):
    return os.getenv(name, str(default)).lower() in ("true", "1", "yes")


class Config:
    """Application settings read from the environment (and a local .env file)."""

    SECRET_KEY = os.getenv("SESSION_SECRET") or os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///interior.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PEPPER = os.getenv("PEPPER", "")
    BCRYPT_ROUNDS = _int_env("BCRYPT_ROUNDS", 10)

    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_CALLBACK_URL = os.getenv("GOOGLE_CALLBACK_URL")
    OAUTH_SUCCESS_REDIRECT = os.getenv(
        "OAUTH_SUCCESS_REDIRECT", "http://localhost/webdesigninterior/dash2/index.php"
    )
    OAUTH_FAILURE_REDIRECT = os.getenv(
        "OAUTH_FAILURE_REDIRECT", "http://localhost/webdesigninterior/dash2/login.php"
    )

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost").split(",")
        if origin.strip()
    ]

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", str(BASE_DIR / "uploads"))
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024
    PHOTO_FETCH_TIMEOUT = _int_env("PHOTO_FETCH_TIMEOUT", 10)

    BOOKING_CODE_MAX_ATTEMPTS = _int_env("BOOKING_CODE_MAX_ATTEMPTS", 5)

    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = _bool_env("SESSION_COOKIE_SECURE")
    SESSION_COOKIE_SAMESITE = "Lax"

    PORT = _int_env("PORT", 3000)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
