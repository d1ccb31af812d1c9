from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate, validates

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

REQUIRED = {"required": "This field is required."}
not_blank = validate.Length(min=1, error="This field is required.")


def _strip_strings(data: Dict[str, Any], keys) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            data[key] = value.strip()
    return data


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    nama = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    username = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    password = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    posisi = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)

    @pre_load
    def strip_fields(self, data: Dict[str, Any], **kwargs):
        return _strip_strings(data, ("nama", "username", "posisi"))


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    password = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)

    @pre_load
    def strip_username(self, data: Dict[str, Any], **kwargs):
        return _strip_strings(data, ("username",))


class BookingSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    tgl_masuk = fields.Date(required=True, error_messages=REQUIRED)
    nama = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    nohp = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    alamat = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    tipe_ruang = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    ukuran_ruang = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    preferensi = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    budget = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    tema = fields.Str(required=True, validate=not_blank, error_messages=REQUIRED)
    aksesoris = fields.Str(load_default=None, allow_none=True)
    jenis_material = fields.List(fields.Str(), load_default=list)

    @pre_load
    def normalize(self, data: Dict[str, Any], **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # size and budget commonly arrive as numbers from the booking form
        for key in ("ukuran_ruang", "budget"):
            if isinstance(data.get(key), (int, float)) and not isinstance(data.get(key), bool):
                data[key] = str(data[key])
        # a single ticked checkbox is posted as a plain string
        materials = data.get("jenis_material")
        if isinstance(materials, str):
            data["jenis_material"] = [materials] if materials.strip() else []
        elif materials is None:
            data.pop("jenis_material", None)
        return _strip_strings(
            data,
            ("nama", "nohp", "alamat", "tipe_ruang", "ukuran_ruang", "preferensi", "budget", "tema"),
        )


class RatingSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    penilaian = fields.Str(required=True, error_messages=REQUIRED)

    @validates("penilaian")
    def validate_not_blank(self, value: str, **kwargs):
        if not value.strip():
            raise ValidationError("Rating cannot be empty.")


def allowed_image(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


register_schema = RegisterSchema()
login_schema = LoginSchema()
booking_schema = BookingSchema()
rating_schema = RatingSchema()
