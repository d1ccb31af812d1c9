from models import DEFAULT_RATING, User


def stored_rating(app):
    with app.app_context():
        return User.query.filter_by(username="alice@example.com").one().penilaian


def test_update_rating(app, logged_in_client):
    response = logged_in_client.patch("/api/rating", json={"penilaian": "Great service, very tidy work"})

    assert response.status_code == 200
    assert response.get_json()["status"] == "success"
    assert stored_rating(app) == "Great service, very tidy work"


def test_rating_overwrites_previous_value(app, logged_in_client):
    logged_in_client.patch("/api/rating", json={"penilaian": "Good"})
    logged_in_client.patch("/api/rating", json={"penilaian": "Excellent"})
    assert stored_rating(app) == "Excellent"


def test_blank_rating_is_rejected(app, logged_in_client):
    for payload in ({"penilaian": "   "}, {"penilaian": ""}, {}):
        response = logged_in_client.patch("/api/rating", json=payload)
        assert response.status_code == 400
        assert response.get_json()["code"] == "validation_error"

    assert stored_rating(app) == DEFAULT_RATING


def test_rating_requires_login(client):
    response = client.patch("/api/rating", json={"penilaian": "Nice"})
    assert response.status_code == 401
