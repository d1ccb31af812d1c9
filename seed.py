import os
from datetime import date, timedelta

import click
from flask.cli import with_appcontext

from models import DEFAULT_RATING, Booking, User, db
from services.accounts import hash_password
from services.bookings import create_booking

sample_booking = {
    "tgl_masuk": date.today() + timedelta(days=14),
    "nama": "Demo Customer",
    "nohp": "081234567890",
    "alamat": "Jl. Contoh No. 1, Jakarta",
    "tipe_ruang": "Living Room",
    "ukuran_ruang": "4x5",
    "preferensi": "Minimalist",
    "aksesoris": "Indoor plants",
    "budget": "15000000",
    "tema": "Scandinavian",
    "jenis_material": ["Wood", "Fabric"],
}


@click.command("seed")
@with_appcontext
def seed_command():
    """Create a demo account with one sample booking."""
    username = os.getenv("DEMO_USERNAME", "demo@example.com")
    password = os.getenv("DEMO_PASSWORD", "Demo123!")

    user = User.query.filter_by(username=username).first()
    if not user:
        user = User(
            username=username,
            password=hash_password(password),
            nama="Demo User",
            posisi="User",
            penilaian=DEFAULT_RATING,
        )
        db.session.add(user)
        db.session.commit()
        click.echo(f"Demo user {username} created!")
    else:
        click.echo("Demo user already exists")

    if Booking.query.filter_by(username=username).first():
        click.echo("Skipping sample booking (already in DB)")
    else:
        booking = create_booking(username, sample_booking)
        click.echo(f"Added booking {booking.kode_booking}")

    click.echo("Seeding complete!")

