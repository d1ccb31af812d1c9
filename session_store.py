"""Server-side sessions stored in the application database.

The cookie only carries a signed, random session id. The session payload
lives in the ``sessions`` table so it survives process restarts, and it
expires a fixed time after creation (``PERMANENT_SESSION_LIFETIME``); writing
to a session never pushes its expiry forward.
"""
import secrets
from datetime import datetime, timezone

from flask.sessions import SecureCookieSession, SessionInterface, session_json_serializer
from itsdangerous import BadSignature, Signer

from models import StoredSession, db


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_sid():
    return secrets.token_urlsafe(32)


class ServerSideSession(SecureCookieSession):
    def __init__(self, initial=None, sid=None, expires_at=None):
        super().__init__(initial)
        self.sid = sid or _new_sid()
        self.expires_at = expires_at
        self.new = expires_at is None
        self.stale_sid = None

    def regenerate(self):
        """Move the payload to a fresh id and restart the expiry clock."""
        if not self.new:
            self.stale_sid = self.sid
        self.sid = _new_sid()
        self.expires_at = None
        self.new = True
        self.modified = True


class SqlAlchemySessionInterface(SessionInterface):
    serializer = session_json_serializer
    session_class = ServerSideSession
    salt = "interior-session"

    def _signer(self, app):
        return Signer(app.secret_key, salt=self.salt)

    def open_session(self, app, request):
        cookie = request.cookies.get(self.get_cookie_name(app))
        if not cookie:
            return self.session_class()

        try:
            sid = self._signer(app).unsign(cookie).decode("utf-8")
        except BadSignature:
            return self.session_class()

        record = db.session.get(StoredSession, sid)
        if record is None:
            return self.session_class()

        if record.expires_at <= _utcnow():
            db.session.delete(record)
            db.session.commit()
            return self.session_class()

        try:
            data = self.serializer.loads(record.data)
        except ValueError:
            app.logger.warning("Discarding unreadable session %s", sid[:8])
            return self.session_class()
        return self.session_class(data, sid=sid, expires_at=record.expires_at)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)
        secure = self.get_cookie_secure(app)
        samesite = self.get_cookie_samesite(app)
        httponly = self.get_cookie_httponly(app)

        if session.accessed:
            response.vary.add("Cookie")

        if session.stale_sid:
            StoredSession.query.filter_by(id=session.stale_sid).delete()

        if not session:
            if session.modified:
                if not session.new:
                    StoredSession.query.filter_by(id=session.sid).delete()
                db.session.commit()
                response.delete_cookie(
                    name, domain=domain, path=path, secure=secure, samesite=samesite, httponly=httponly
                )
            return

        if not session.modified:
            return

        expires_at = session.expires_at or _utcnow() + app.permanent_session_lifetime
        record = db.session.get(StoredSession, session.sid)
        if record is None:
            record = StoredSession(id=session.sid, expires_at=expires_at)
            db.session.add(record)
        record.data = self.serializer.dumps(dict(session))
        db.session.commit()

        response.set_cookie(
            name,
            self._signer(app).sign(session.sid).decode("utf-8"),
            expires=expires_at.replace(tzinfo=timezone.utc),
            httponly=httponly,
            domain=domain,
            path=path,
            secure=secure,
            samesite=samesite,
        )


def purge_expired_sessions():
    deleted = StoredSession.query.filter(StoredSession.expires_at <= _utcnow()).delete()
    db.session.commit()
    return deleted
