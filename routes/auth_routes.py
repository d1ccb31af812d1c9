from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for
from flask_login import login_user, logout_user
from marshmallow import ValidationError as MarshmallowValidationError

from errors import InvalidCredentials, OAuthNotConfigured, PasswordLoginUnavailable, ValidationError, marshmallow_errors
from schemas import REQUIRED, allowed_image, login_schema, register_schema
from services.accounts import AuthMethod, OAuthProfile, authenticate, register_user

auth_bp = Blueprint("auth", __name__, url_prefix="/api")

GOOGLE_SCOPES = "openid email profile"


def _start_session(user):
    # fresh session id at every login so a pre-login cookie is never promoted
    session.regenerate()
    login_user(user)


def _google_client():
    if not current_app.config.get("GOOGLE_CLIENT_ID"):
        raise OAuthNotConfigured()
    return current_app.extensions["oauth"].create_client("google")


@auth_bp.route("/register", methods=["POST"])
def register():
    errors = []
    payload = None
    try:
        payload = register_schema.load(request.form.to_dict())
    except MarshmallowValidationError as exc:
        errors = marshmallow_errors(exc.messages)

    image = request.files.get("gambar")
    if image is None or not image.filename:
        errors.append({"field": "gambar", "msg": REQUIRED["required"]})
    elif not allowed_image(image.filename):
        errors.append({"field": "gambar", "msg": "Unsupported image type."})

    if errors:
        missing = any(error["msg"] == REQUIRED["required"] for error in errors)
        raise ValidationError("All fields are required" if missing else "Invalid input", errors=errors)

    user = register_user(
        nama=payload["nama"],
        username=payload["username"],
        password=payload["password"],
        posisi=payload["posisi"],
        image=image,
    )
    current_app.logger.info("Registered user %s", user.username)
    return jsonify({"status": "success", "message": "Registration successful! Please log in."}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form.to_dict()
    credentials = login_schema.load(data)

    try:
        user = authenticate(AuthMethod.LOCAL, credentials)
    except (InvalidCredentials, PasswordLoginUnavailable) as exc:
        current_app.logger.warning("Failed login for %s (%s)", credentials["username"], exc.code)
        raise

    _start_session(user)
    current_app.logger.info("User %s logged in (%s)", user.username, AuthMethod.LOCAL.value)
    return jsonify({"status": "success", "message": "Login successful", "user": user.to_dict()})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    session.clear()
    return jsonify({"status": "success", "message": "Logout successful"})


@auth_bp.route("/auth/google", methods=["GET"])
def google_login():
    client = _google_client()
    redirect_uri = current_app.config.get("GOOGLE_CALLBACK_URL") or url_for(
        "auth.google_callback", _external=True
    )
    return client.authorize_redirect(redirect_uri)


@auth_bp.route("/auth/google/callback", methods=["GET"])
def google_callback():
    client = _google_client()
    try:
        token = client.authorize_access_token()
        userinfo = token.get("userinfo") or client.userinfo(token=token)
        user = authenticate(AuthMethod.GOOGLE, OAuthProfile.from_userinfo(userinfo))
    except Exception:
        current_app.logger.exception("Google login failed")
        return redirect(current_app.config["OAUTH_FAILURE_REDIRECT"])

    _start_session(user)
    current_app.logger.info("User %s logged in (%s)", user.username, AuthMethod.GOOGLE.value)
    return redirect(current_app.config["OAUTH_SUCCESS_REDIRECT"])
