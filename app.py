import click
from authlib.integrations.flask_client import OAuth
from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from flask_login import LoginManager
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from config import Config
from errors import ApiError, InternalError, Unauthorized, ValidationError, marshmallow_errors
from models import User, db
from routes.auth_routes import GOOGLE_SCOPES, auth_bp
from routes.booking_routes import booking_bp
from routes.user_routes import user_bp
from seed import seed_command
from session_store import SqlAlchemySessionInterface, purge_expired_sessions

GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"

HTTP_ERROR_CODES = {
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
}

login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized()


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(exc):
        error = ValidationError(errors=marshmallow_errors(exc.messages))
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        body = {
            "status": "error",
            "code": HTTP_ERROR_CODES.get(exc.code, "http_error"),
            "message": exc.description,
        }
        return jsonify(body), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", exc)
        error = InternalError()
        return jsonify(error.to_dict()), error.status_code


def register_commands(app):
    @app.cli.command("init-db")
    def init_db_command():
        """Create all database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("purge-sessions")
    def purge_sessions_command():
        """Delete expired login sessions."""
        deleted = purge_expired_sessions()
        click.echo(f"Removed {deleted} expired session(s).")

    app.cli.add_command(seed_command)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    if not app.config["SECRET_KEY"]:
        raise RuntimeError("SESSION_SECRET (or SECRET_KEY) must be set to sign session cookies")
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    app.session_interface = SqlAlchemySessionInterface()
    login_manager.init_app(app)
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    oauth = OAuth(app)
    oauth.register(
        name="google",
        server_metadata_url=GOOGLE_DISCOVERY_URL,
        client_kwargs={"scope": GOOGLE_SCOPES},
    )
    app.extensions["oauth"] = oauth

    app.register_blueprint(auth_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(user_bp)
    register_error_handlers(app)
    register_commands(app)

    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    @app.route("/health")
    def health():
        return {"status": "ok"}

    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    application = create_app()
    application.run(port=application.config["PORT"], debug=True)
