import os
import secrets
import time
from pathlib import Path

import requests
from flask import current_app
from werkzeug.utils import secure_filename

UPLOAD_URL_PREFIX = "uploads"


def _timestamp_ms():
    return int(time.time() * 1000)


def upload_dir() -> Path:
    folder = Path(current_app.config["UPLOAD_FOLDER"])
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def local_path(db_path):
    """Map a stored ``uploads/<file>`` path back to the file on disk."""
    if not db_path or not db_path.startswith(f"{UPLOAD_URL_PREFIX}/"):
        return None
    return upload_dir() / db_path.split("/", 1)[1]


def save_upload(file_storage) -> str:
    """Save a multipart upload as ``<epoch-ms>_<token><ext>`` and return its stored path."""
    ext = os.path.splitext(secure_filename(file_storage.filename or ""))[1].lower()
    filename = f"{_timestamp_ms()}_{secrets.token_hex(8)}{ext}"
    file_storage.save(upload_dir() / filename)
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def fetch_profile_photo(url: str) -> bytes:
    """Download a profile photo from the identity provider."""
    response = requests.get(url, timeout=current_app.config["PHOTO_FETCH_TIMEOUT"])
    response.raise_for_status()
    return response.content


def same_photo(db_path, content: bytes) -> bool:
    path = local_path(db_path)
    if path is None or not path.is_file():
        return False
    return path.read_bytes() == content


def store_profile_photo(external_id: str, content: bytes) -> str:
    filename = secure_filename(f"{external_id}_{_timestamp_ms()}_{secrets.token_hex(8)}.jpg")
    (upload_dir() / filename).write_bytes(content)
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def discard(db_path):
    """Remove a stored photo whose database write never happened."""
    path = local_path(db_path)
    if path is None:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
