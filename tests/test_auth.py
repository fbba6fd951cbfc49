from datetime import datetime, timedelta, timezone

import pyotp
import requests

from app.models import Otp, PasswordReset, User
from app.services.messaging import resend as mailer

PASSWORD = "Secret123!"


def register_payload(**overrides):
    payload = {
        "name": "Shilan Ahmed",
        "username": "shilan",
        "email": "shilan@example.com",
        "phone": "07501112233",
        "password": PASSWORD,
        "confirm_password": PASSWORD,
    }
    payload.update(overrides)
    return payload


def test_register_creates_unverified_user_with_otp(client, db):
    response = client.post("/auth/register", json=register_payload())

    assert response.status_code == 201
    user = db.query(User).filter_by(email="shilan@example.com").one()
    assert user.is_verified is False
    assert user.password != PASSWORD
    otp = db.query(Otp).filter_by(user_id=user.id).one()
    assert len(otp.code) == 6 and otp.code.isdigit()


def test_register_rejects_duplicate_email(client, db, make_user):
    make_user(email="shilan@example.com")

    response = client.post("/auth/register", json=register_payload(username="other"))

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "email_in_use"
    assert db.query(User).count() == 1


def test_register_rejects_duplicate_username(client, db, make_user):
    make_user(username="shilan")

    response = client.post("/auth/register", json=register_payload(email="another@example.com"))

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "username_in_use"
    assert db.query(User).count() == 1


def test_register_succeeds_when_mail_provider_fails(client, db, monkeypatch):
    def broken_send(*args, **kwargs):
        raise requests.HTTPError("502 Bad Gateway")

    monkeypatch.setattr(mailer, "send_verification_email", broken_send)

    response = client.post("/auth/register", json=register_payload())

    assert response.status_code == 201
    user = db.query(User).filter_by(email="shilan@example.com").one()
    assert db.query(Otp).filter_by(user_id=user.id).count() == 1


def test_register_rejects_password_mismatch(client, db):
    response = client.post("/auth/register", json=register_payload(confirm_password="Different1!"))

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "password_mismatch"
    assert db.query(User).count() == 0


def test_register_validation_error_envelope(client):
    response = client.post("/auth/register", json=register_payload(email="not-an-email"))

    body = response.json()
    assert response.status_code == 400
    assert body["status"] == "error"
    assert body["message"] == "Validation failed."
    assert body["error"]["details"]


def test_verify_otp_marks_user_verified_and_deletes_code(client, db, make_user):
    user = make_user(verified=False)
    db.add(Otp(user_id=user.id, code="123456", expires_at=datetime.now(timezone.utc) + timedelta(minutes=10)))
    db.commit()

    response = client.post("/auth/verify-otp", json={"email": user.email, "code": "123456"})

    assert response.status_code == 200
    db.expire_all()
    assert db.get(User, user.id).is_verified is True
    assert db.query(Otp).filter_by(user_id=user.id).count() == 0


def test_verify_otp_wrong_code(client, db, make_user):
    user = make_user(verified=False)
    db.add(Otp(user_id=user.id, code="123456", expires_at=datetime.now(timezone.utc) + timedelta(minutes=10)))
    db.commit()

    response = client.post("/auth/verify-otp", json={"email": user.email, "code": "654321"})

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "invalid_otp"
    db.expire_all()
    assert db.get(User, user.id).is_verified is False


def test_verify_otp_expired(client, db, make_user):
    user = make_user(verified=False)
    db.add(Otp(user_id=user.id, code="123456", expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)))
    db.commit()

    response = client.post("/auth/verify-otp", json={"email": user.email, "code": "123456"})

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "otp_expired"


def test_verify_otp_without_code_on_file(client, make_user):
    user = make_user(verified=False)

    response = client.post("/auth/verify-otp", json={"email": user.email, "code": "123456"})

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "no_otp_found"


def test_resend_otp_overwrites_existing_code(client, db, make_user):
    user = make_user(verified=False)
    db.add(Otp(user_id=user.id, code="000000", expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)))
    db.commit()

    response = client.post("/auth/resend-otp", json={"email": user.email})

    assert response.status_code == 200
    db.expire_all()
    otps = db.query(Otp).filter_by(user_id=user.id).all()
    assert len(otps) == 1
    assert otps[0].code != "000000"


def test_resend_otp_for_verified_user(client, make_user):
    user = make_user(verified=True)

    response = client.post("/auth/resend-otp", json={"email": user.email})

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "already_verified"


def test_login_unverified_user_gets_new_otp(client, db, make_user):
    user = make_user(verified=False)

    response = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 401
    assert response.json()["error"]["key"] == "ACCOUNT_NOT_VERIFIED"
    assert db.query(Otp).filter_by(user_id=user.id).count() == 1


def test_login_wrong_password(client, make_user):
    user = make_user()

    response = client.post("/auth/login", json={"email": user.email, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["error"]["key"] == "wrong_credentials"


def test_login_sets_cookie_and_authenticates(client, make_user):
    user = make_user()

    response = client.post("/auth/login", json={"email": user.email.upper(), "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["jwt"]
    assert body["data"]["user"]["id"] == user.id
    assert "password" not in body["data"]["user"]
    assert "Authentication" in client.cookies

    me = client.get("/auth")
    assert me.status_code == 200
    assert me.json()["data"]["email"] == user.email


def test_logout_clears_cookie(client, make_user):
    user = make_user()
    client.post("/auth/login", json={"email": user.email, "password": PASSWORD})

    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert "Authentication" not in client.cookies
    assert client.get("/auth").status_code == 401


def test_get_auth_requires_token(client):
    response = client.get("/auth")

    assert response.status_code == 401
    assert response.json()["error"]["key"] == "unauthorized"


def test_get_auth_rejects_garbage_token(client):
    response = client.get("/auth", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["error"]["key"] == "invalid_token"


def test_two_factor_login_flow(client, db, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)

    secret_response = client.get("/auth/2fa/secret", headers=headers)
    assert secret_response.status_code == 200
    data = secret_response.json()["data"]
    secret = data["secret"]
    assert data["otpauth_url"].startswith("otpauth://totp/")
    assert data["qr_code"].startswith("data:image/png;base64,")

    # Asking again hands back the same secret
    again = client.get("/auth/2fa/secret", headers=headers)
    assert again.json()["data"]["secret"] == secret

    activate = client.post("/auth/2fa/activate", headers=headers, json={"code": pyotp.TOTP(secret).now()})
    assert activate.status_code == 200

    login = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})
    assert login.status_code == 401
    assert login.json()["error"]["key"] == "TWO_FACTOR_AUTHENTICATION_REQUIRED"

    bad = client.post("/auth/verify-2fa", json={"email": user.email, "password": PASSWORD, "code": "000000"})
    assert bad.status_code == 400
    assert bad.json()["error"]["key"] == "invalid_2fa_code"

    good = client.post(
        "/auth/verify-2fa",
        json={"email": user.email, "password": PASSWORD, "code": pyotp.TOTP(secret).now()},
    )
    assert good.status_code == 200
    assert good.json()["data"]["jwt"]


def test_deactivate_two_factor_clears_secret(client, db, make_user, auth_headers):
    user = make_user(two_factor_secret=pyotp.random_base32(), two_factor_enabled=True)

    response = client.post("/auth/2fa/deactivate", headers=auth_headers(user))

    assert response.status_code == 200
    db.expire_all()
    refreshed = db.get(User, user.id)
    assert refreshed.two_factor_enabled is False
    assert refreshed.two_factor_secret is None


def test_change_password(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)

    wrong = client.post("/auth/change-password", headers=headers, json={
        "current_password": "nope-nope", "password": "NewSecret1!", "confirm_password": "NewSecret1!",
    })
    assert wrong.json()["error"]["key"] == "incorrect_password"

    same = client.post("/auth/change-password", headers=headers, json={
        "current_password": PASSWORD, "password": PASSWORD, "confirm_password": PASSWORD,
    })
    assert same.json()["error"]["key"] == "same_password_error"

    ok = client.post("/auth/change-password", headers=headers, json={
        "current_password": PASSWORD, "password": "NewSecret1!", "confirm_password": "NewSecret1!",
    })
    assert ok.status_code == 200
    login = client.post("/auth/login", json={"email": user.email, "password": "NewSecret1!"})
    assert login.status_code == 200


def test_password_reset_answer_does_not_leak_accounts(client, db, make_user):
    user = make_user()

    unknown = client.post("/auth/password-reset", json={"email": "nobody@example.com"})
    known = client.post("/auth/password-reset", json={"email": user.email})

    assert unknown.status_code == known.status_code == 200
    assert unknown.json()["message"] == known.json()["message"]
    assert db.query(PasswordReset).count() == 1


def test_password_reset_token_updates_password(client, db, make_user):
    user = make_user()
    client.post("/auth/password-reset", json={"email": user.email})
    token = db.query(PasswordReset).filter_by(user_id=user.id).one().token

    check = client.get(f"/auth/verify-reset-password-token/{token}")
    assert check.status_code == 200

    response = client.post("/auth/update-password", json={
        "token": token, "password": "BrandNew1!", "confirm_password": "BrandNew1!",
    })
    assert response.status_code == 200
    db.expire_all()
    assert db.query(PasswordReset).count() == 0

    login = client.post("/auth/login", json={"email": user.email, "password": "BrandNew1!"})
    assert login.status_code == 200

    reused = client.get(f"/auth/verify-reset-password-token/{token}")
    assert reused.status_code == 400
    assert reused.json()["error"]["key"] == "invalid_token"


def test_expired_reset_token(client, db, make_user):
    user = make_user()
    db.add(PasswordReset(user_id=user.id, token="a" * 64, expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)))
    db.commit()

    response = client.get(f"/auth/verify-reset-password-token/{'a' * 64}")

    assert response.status_code == 400
    assert response.json()["error"]["key"] == "expired_token"


def test_error_message_follows_language_header(client):
    response = client.get("/auth", headers={"x-lang": "ar"})

    assert response.json()["message"] == "غير مصرح لك. يرجى تسجيل الدخول."
