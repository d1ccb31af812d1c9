from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from schemas import rating_schema
from services.accounts import update_rating

user_bp = Blueprint("user_api", __name__, url_prefix="/api")


@user_bp.route("/user", methods=["GET"])
@user_bp.route("/session", methods=["GET"])
@login_required
def current_identity():
    return jsonify({"status": "success", "data": current_user.to_dict()})


@user_bp.route("/rating", methods=["PATCH"])
@login_required
def rate():
    payload = rating_schema.load(request.get_json(silent=True) or request.form.to_dict())
    update_rating(current_user._get_current_object(), payload["penilaian"].strip())
    return jsonify({"status": "success", "message": "Thank you, your rating has been saved!"})
