"""Account provisioning and the two ways of proving who a caller is.

Local logins check a bcrypt hash; Google logins trust the provider's verified
profile and provision or link a row in the ``user`` table as a side effect.
"""
import enum
from dataclasses import dataclass
from typing import Optional

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from errors import Conflict, InvalidCredentials, PasswordLoginUnavailable, ValidationError
from models import DEFAULT_POSITION, DEFAULT_RATING, User, db
from services import photos

BCRYPT_MAX_BYTES = 72


class AuthMethod(enum.Enum):
    LOCAL = "local"
    GOOGLE = "google"


@dataclass
class OAuthProfile:
    external_id: str
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_userinfo(cls, userinfo):
        return cls(
            external_id=str(userinfo["sub"]),
            email=userinfo["email"],
            display_name=userinfo.get("name"),
            photo_url=userinfo.get("picture"),
        )


def _peppered(password: str) -> bytes:
    return password.encode("utf-8") + current_app.config["PEPPER"].encode("utf-8")


def hash_password(password: str) -> str:
    material = _peppered(password)
    if len(material) > BCRYPT_MAX_BYTES:
        raise ValidationError("Password is too long", errors=[{"field": "password", "msg": "Password is too long"}])
    salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
    return bcrypt.hashpw(material, salt).decode("utf-8")


def verify_password(entered_password: str, stored_hash: str) -> bool:
    material = _peppered(entered_password)
    if len(material) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(material, stored_hash.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


class LocalAuthenticator:
    method = AuthMethod.LOCAL

    def authenticate(self, credentials) -> User:
        user = User.query.filter_by(username=credentials["username"]).first()
        if user is None:
            raise InvalidCredentials()
        if not user.password:
            raise PasswordLoginUnavailable()
        if not verify_password(credentials["password"], user.password):
            raise InvalidCredentials()
        return user


class OAuthAuthenticator:
    def __init__(self, method=AuthMethod.GOOGLE):
        self.method = method

    def authenticate(self, profile: OAuthProfile) -> User:
        content = photos.fetch_profile_photo(profile.photo_url) if profile.photo_url else None
        try:
            return self._provision(profile, content)
        except IntegrityError:
            # another request created or linked the same identity first
            current_app.logger.warning(
                "Concurrent %s login for %s, retrying lookup", self.method.value, profile.external_id
            )
            return self._provision(profile, content)

    def _provision(self, profile: OAuthProfile, content: Optional[bytes]) -> User:
        new_path = None
        try:
            user = User.query.filter_by(google_id=profile.external_id).first()
            if user is not None:
                if content is not None and not photos.same_photo(user.gambar, content):
                    new_path = photos.store_profile_photo(profile.external_id, content)
                    user.gambar = new_path
            else:
                if content is not None:
                    new_path = photos.store_profile_photo(profile.external_id, content)
                user = User.query.filter_by(username=profile.email).first()
                if user is not None:
                    user.google_id = profile.external_id
                    if new_path:
                        user.gambar = new_path
                else:
                    user = User(
                        google_id=profile.external_id,
                        username=profile.email,
                        nama=profile.display_name or profile.email,
                        gambar=new_path,
                        posisi=DEFAULT_POSITION,
                        penilaian=DEFAULT_RATING,
                    )
                    db.session.add(user)
            db.session.commit()
        except Exception:
            db.session.rollback()
            if new_path:
                photos.discard(new_path)
            raise
        return user


AUTHENTICATORS = {
    AuthMethod.LOCAL: LocalAuthenticator(),
    AuthMethod.GOOGLE: OAuthAuthenticator(AuthMethod.GOOGLE),
}


def authenticate(method: AuthMethod, credentials) -> User:
    return AUTHENTICATORS[method].authenticate(credentials)


def register_user(nama, username, password, posisi, image) -> User:
    if User.query.filter_by(username=username).first() is not None:
        raise Conflict()

    hashed_password = hash_password(password)
    gambar = photos.save_upload(image)
    user = User(
        username=username,
        password=hashed_password,
        nama=nama,
        gambar=gambar,
        posisi=posisi,
        penilaian=DEFAULT_RATING,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        photos.discard(gambar)
        raise Conflict()
    except Exception:
        db.session.rollback()
        photos.discard(gambar)
        raise
    return user


def update_rating(user: User, penilaian: str) -> User:
    user.penilaian = penilaian
    db.session.commit()
    return user
