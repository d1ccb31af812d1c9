from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from schemas import booking_schema
from services.bookings import create_booking, list_bookings, next_booking_code

booking_bp = Blueprint("booking_api", __name__, url_prefix="/api")


def _booking_payload():
    payload = request.get_json(silent=True)
    if payload is not None:
        return payload
    # checkbox groups arrive as repeated form keys
    payload = request.form.to_dict()
    payload.pop("jenis_material[]", None)
    payload["jenis_material"] = request.form.getlist("jenis_material") or request.form.getlist(
        "jenis_material[]"
    )
    return payload


@booking_bp.route("/bookings", methods=["GET"])
@login_required
def get_bookings():
    bookings = list_bookings(current_user.username)
    return jsonify({"status": "success", "data": [b.to_dict() for b in bookings]})


@booking_bp.route("/bookings", methods=["POST"])
@login_required
def post_booking():
    fields = booking_schema.load(_booking_payload())
    booking = create_booking(current_user.username, fields)
    current_app.logger.info("Booking %s created for %s", booking.kode_booking, booking.username)
    return (
        jsonify(
            {
                "status": "success",
                "message": "Booking submitted successfully!",
                "data": booking.to_dict(),
            }
        ),
        201,
    )


@booking_bp.route("/booking/new-code", methods=["GET"])
@login_required
def new_booking_code():
    return jsonify({"status": "success", "newBookingCode": next_booking_code()})
