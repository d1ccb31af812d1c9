from enum import Enum

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

DEFAULT_POSITION = "User"
DEFAULT_RATING = "Belum memberikan penilaian"


class BookingStatus(str, Enum):
    PENDING = "pending"


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    # null for accounts that only ever signed in through Google
    password = db.Column(db.String(255), nullable=True)
    nama = db.Column(db.String(255), nullable=False)
    gambar = db.Column(db.String(255))
    posisi = db.Column(db.String(100), nullable=False, default=DEFAULT_POSITION)
    penilaian = db.Column(db.Text, nullable=False, default=DEFAULT_RATING)
    google_id = db.Column(db.String(255), unique=True, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "nama": self.nama,
            "gambar": self.gambar,
            "posisi": self.posisi,
            "penilaian": self.penilaian,
            "google_id": self.google_id,
        }


class Booking(db.Model):
    __tablename__ = 'tblbooking'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), nullable=False, index=True)
    kode_booking = db.Column(db.String(20), unique=True, nullable=False)
    tgl_masuk = db.Column(db.Date, nullable=False)
    nama = db.Column(db.String(255), nullable=False)
    nohp = db.Column(db.String(50), nullable=False)
    alamat = db.Column(db.Text, nullable=False)
    tipe_ruang = db.Column(db.String(100), nullable=False)
    ukuran_ruang = db.Column(db.String(100), nullable=False)
    preferensi = db.Column(db.String(255), nullable=False)
    aksesoris = db.Column(db.String(255))
    jenis_material = db.Column(db.Text, nullable=False, default="")
    tema = db.Column(db.String(100), nullable=False)
    budget = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING.value)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "kode_booking": self.kode_booking,
            "tgl_masuk": self.tgl_masuk.isoformat() if self.tgl_masuk else None,
            "nama": self.nama,
            "nohp": self.nohp,
            "alamat": self.alamat,
            "tipe_ruang": self.tipe_ruang,
            "ukuran_ruang": self.ukuran_ruang,
            "preferensi": self.preferensi,
            "aksesoris": self.aksesoris,
            "jenis_material": self.jenis_material,
            "tema": self.tema,
            "budget": self.budget,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StoredSession(db.Model):
    __tablename__ = 'sessions'
    id = db.Column(db.String(64), primary_key=True)
    data = db.Column(db.Text, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
