from coaching.models.user import User
from tests.conftest import auth_headers, make_user


def _send(client, identifier, channel):
    return client.post("/api/auth/send-otp", json={"identifier": identifier, "type": channel})


def _verify(client, identifier, otp, channel):
    return client.post(
        "/api/auth/verify-otp", json={"identifier": identifier, "otp": otp, "type": channel}
    )


def test_email_otp_wrong_then_right_then_replay(client, ledger, notifier):
    response = _send(client, "user@test.com", "email")
    assert response.status_code == 200
    assert response.json() == {"message": "OTP sent to email"}
    code = ledger.issued["user@test.com"]
    wrong = "000000" if code != "000000" else "111111"

    response = _verify(client, "user@test.com", wrong, "email")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or Expired OTP"
    assert "user@test.com" in ledger

    response = _verify(client, "user@test.com", code, "email")
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = _verify(client, "user@test.com", code, "email")
    assert response.status_code == 400


def test_email_otp_delivery_failure_returns_503(client, notifier):
    notifier.deliver = False

    response = _send(client, "user@test.com", "email")

    assert response.status_code == 503


def test_phone_otp_message(client, ledger):
    response = _send(client, "9876543210", "phone")

    assert response.status_code == 200
    assert "Check Server Console" in response.json()["message"]
    assert "+919876543210" in ledger


def test_expired_code_is_rejected(client, ledger, clock):
    _send(client, "user@test.com", "email")
    clock.advance(minutes=5, seconds=1)

    response = _verify(client, "user@test.com", ledger.issued["user@test.com"], "email")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or Expired OTP"


def _register(client, ledger, **overrides):
    phone = "9876543210"
    _send(client, phone, "phone")
    code = ledger.issued["+919876543210"]
    token = _verify(client, phone, code, "phone").json()["verification_token"]
    body = {
        "name": "Asha",
        "email": "asha@test.com",
        "phone": phone,
        "password": "pw",
        "role": "STUDENT",
        "verification_token": token,
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_register_and_login_by_raw_phone(client, ledger):
    response = _register(client, ledger)
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["phone"] == "+919876543210"
    assert "password" not in data["user"]
    assert data["access_token"]

    _send(client, "9876543210", "phone")
    response = client.post(
        "/api/auth/login-via-phone",
        json={"phone": "9876543210", "otp": ledger.issued["+919876543210"]},
    )
    assert response.status_code == 200
    assert response.json()["user"]["id"] == data["user"]["id"]


def test_register_without_verification_is_refused(client, session_factory):
    response = client.post(
        "/api/auth/register",
        json={
            "name": "Asha",
            "email": "asha@test.com",
            "phone": "9876543210",
            "password": "pw",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Please verify Phone OTP first"
    db = session_factory()
    assert db.query(User).count() == 0
    db.close()


def test_register_duplicate_email(client, ledger, session_factory):
    db = session_factory()
    make_user(db, email="asha@test.com", phone="+919000000001")
    db.close()

    response = _register(client, ledger)

    assert response.status_code == 400
    assert response.json()["detail"] == {"message": "Email already in use", "field": "email"}


def test_password_login(client, session_factory):
    db = session_factory()
    make_user(db, email="asha@test.com", password="pw")
    db.close()

    ok = client.post("/api/auth/login", json={"identifier": "asha@test.com", "password": "pw"})
    bad = client.post("/api/auth/login", json={"identifier": "asha@test.com", "password": "x"})

    assert ok.status_code == 200
    assert ok.json()["token_type"] == "bearer"
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid credentials"


def test_login_via_phone_not_registered(client, ledger):
    _send(client, "9876543210", "phone")

    response = client.post(
        "/api/auth/login-via-phone",
        json={"phone": "9876543210", "otp": ledger.issued["+919876543210"]},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "User not registered"


def test_reset_password(client, ledger, session_factory):
    db = session_factory()
    make_user(db, email="asha@test.com", password="old")
    db.close()
    _send(client, "asha@test.com", "email")

    response = client.post(
        "/api/auth/reset-password",
        json={"email": "asha@test.com", "otp": ledger.issued["asha@test.com"], "new_password": "new"},
    )

    assert response.status_code == 200
    login = client.post("/api/auth/login", json={"identifier": "asha@test.com", "password": "new"})
    assert login.status_code == 200


def test_me_requires_token(client, session_factory):
    db = session_factory()
    user = make_user(db)
    headers = auth_headers(user)
    db.close()

    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == user.id


def test_verification_token_is_not_a_session(client, ledger):
    _send(client, "user@test.com", "email")
    token = _verify(client, "user@test.com", ledger.issued["user@test.com"], "email").json()[
        "verification_token"
    ]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_admin_role_cannot_self_register(client, ledger):
    response = _register(client, ledger, role="ADMIN")

    assert response.status_code == 403


def test_email_is_matched_case_insensitively(client, ledger):
    response = _register(client, ledger, email="Asha@Test.COM")
    assert response.status_code == 201
    assert response.json()["user"]["email"] == "asha@test.com"

    login = client.post("/api/auth/login", json={"identifier": "Asha@Test.COM", "password": "pw"})

    assert login.status_code == 200
    assert login.json()["user"]["id"] == response.json()["user"]["id"]


def test_reset_password_with_mixed_case_email(client, ledger, session_factory):
    db = session_factory()
    make_user(db, email="asha@test.com", password="old")
    db.close()
    _send(client, "Asha@Test.COM", "email")

    response = client.post(
        "/api/auth/reset-password",
        json={"email": "Asha@Test.COM", "otp": ledger.issued["asha@test.com"], "new_password": "new"},
    )

    assert response.status_code == 200
    login = client.post("/api/auth/login", json={"identifier": "ASHA@test.com", "password": "new"})
    assert login.status_code == 200


def test_send_otp_requires_an_identifier(client, ledger):
    response = _send(client, "  ", "email")

    assert response.status_code == 400
    assert response.json()["detail"] == "Email or phone is required"
    assert len(ledger) == 0


def test_failed_delivery_keeps_previous_code(client, ledger, notifier):
    _send(client, "user@test.com", "email")
    code = ledger.issued["user@test.com"]
    notifier.deliver = False

    assert _send(client, "user@test.com", "email").status_code == 503
    response = _verify(client, "user@test.com", code, "email")

    assert response.status_code == 200
