import re

from flask import current_app
from sqlalchemy.exc import IntegrityError

from errors import InternalError
from models import Booking, BookingStatus, db

CODE_PREFIX = "b"
CODE_WIDTH = 3
MATERIAL_SEPARATOR = ", "

_numeric_suffix = re.compile(r"(\d+)$")


def next_code_from(codes) -> str:
    """Return the code after the highest numeric suffix in ``codes``.

    ``b001``..``b999`` compare on their last three characters; past that the
    whole trailing number is used so the sequence keeps increasing.
    """
    highest = 0
    for code in codes:
        match = _numeric_suffix.search(code or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{CODE_PREFIX}{highest + 1:0{CODE_WIDTH}d}"


def next_booking_code() -> str:
    codes = db.session.scalars(db.select(Booking.kode_booking)).all()
    return next_code_from(codes)


def join_materials(materials) -> str:
    return MATERIAL_SEPARATOR.join(materials or [])


def list_bookings(username):
    return (
        Booking.query.filter_by(username=username)
        .order_by(Booking.tgl_masuk.desc(), Booking.id.desc())
        .all()
    )


def create_booking(username, fields) -> Booking:
    attempts = current_app.config["BOOKING_CODE_MAX_ATTEMPTS"]
    for attempt in range(1, attempts + 1):
        code = next_booking_code()
        booking = Booking(
            username=username,
            kode_booking=code,
            tgl_masuk=fields["tgl_masuk"],
            nama=fields["nama"],
            nohp=fields["nohp"],
            alamat=fields["alamat"],
            tipe_ruang=fields["tipe_ruang"],
            ukuran_ruang=fields["ukuran_ruang"],
            preferensi=fields["preferensi"],
            aksesoris=fields.get("aksesoris"),
            budget=fields["budget"],
            tema=fields["tema"],
            jenis_material=join_materials(fields.get("jenis_material")),
            status=BookingStatus.PENDING.value,
        )
        db.session.add(booking)
        try:
            db.session.commit()
            return booking
        except IntegrityError:
            # the unique index on kode_booking lost a race; recompute and retry
            db.session.rollback()
            current_app.logger.warning(
                "Booking code %s already taken (attempt %d/%d)", code, attempt, attempts
            )
    raise InternalError("Could not allocate a booking code")
