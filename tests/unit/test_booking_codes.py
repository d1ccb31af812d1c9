from models import Booking
from services.bookings import join_materials, next_code_from


def test_next_code_after_unordered_codes():
    assert next_code_from(["b001", "b003", "b002"]) == "b004"


def test_next_code_for_empty_table():
    assert next_code_from([]) == "b001"


def test_next_code_skips_codes_without_number():
    assert next_code_from(["b010", "legacy", None, ""]) == "b011"


def test_next_code_keeps_increasing_past_three_digits():
    assert next_code_from(["b999"]) == "b1000"
    assert next_code_from(["b999", "b1000"]) == "b1001"


def test_join_materials():
    assert join_materials(["A", "B", "C"]) == "A, B, C"
    assert join_materials([]) == ""
    assert join_materials(None) == ""


def test_seed_command_is_idempotent(app):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["seed"])
    assert "Demo user demo@example.com created!" in first.output
    assert "Added booking b001" in first.output

    second = runner.invoke(args=["seed"])
    assert "Demo user already exists" in second.output
    with app.app_context():
        assert Booking.query.count() == 1
