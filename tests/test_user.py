from app.models import User


def profile(**overrides):
    payload = {
        "name": "Renamed User",
        "username": "renamed",
        "email": "renamed@example.com",
        "phone": "07509998877",
    }
    payload.update(overrides)
    return payload


def test_update_own_profile(client, db, make_user, auth_headers):
    user = make_user()

    response = client.put(f"/users/{user.id}", headers=auth_headers(user), json=profile())

    assert response.status_code == 200
    assert response.json()["data"]["username"] == "renamed"
    db.expire_all()
    assert db.get(User, user.id).email == "renamed@example.com"


def test_update_profile_keeps_own_email(client, make_user, auth_headers):
    user = make_user()

    response = client.put(f"/users/{user.id}", headers=auth_headers(user), json=profile(email=user.email))

    assert response.status_code == 200


def test_update_profile_rejects_taken_username(client, make_user, auth_headers):
    user = make_user()
    other = make_user()

    response = client.put(f"/users/{user.id}", headers=auth_headers(user), json=profile(username=other.username))

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "username_in_use"


def test_update_someone_elses_profile_is_forbidden(client, make_user, auth_headers):
    user = make_user()
    other = make_user()

    response = client.put(f"/users/{other.id}", headers=auth_headers(user), json=profile())

    assert response.status_code == 403
