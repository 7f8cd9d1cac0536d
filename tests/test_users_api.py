from app.core.config import settings
from app.core.security import decode_access_token, verify_password

PREFIX = settings.API_PREFIX

ASHA = {
    "name": "Asha",
    "mobile": "9991112222",
    "email": "asha@example.com",
    "password": "secret1",
    "referralCode": "FRIEND10",
}


def register(client, **overrides):
    return client.post(f"{PREFIX}/register", json={**ASHA, **overrides})


def only_user(store):
    (document,) = store.documents.values()
    return document


def test_register_creates_unverified_user(client, store):
    response = register(client)

    assert response.status_code == 201
    assert response.json()["msg"] == "User registered successfully"

    document = only_user(store)
    assert document["_id"] == response.json()["id"]
    assert document["is_verified"] is False
    assert document["pin_hash"] is None
    assert document["referral_code"] == "FRIEND10"
    assert "otp" not in document
    assert document["password_hash"] != "secret1"
    assert verify_password("secret1", document["password_hash"])


def test_register_rejects_duplicate_mobile(client):
    assert register(client).status_code == 201

    response = register(client, email="other@example.com", name="Someone Else")

    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"


def test_register_rejects_duplicate_email(client):
    assert register(client).status_code == 201

    response = register(client, mobile="+91 8887776666")

    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"


def test_register_validates_fields(client):
    response = client.post(
        f"{PREFIX}/register",
        json={"name": " ", "mobile": "12", "email": "not-an-email", "password": "123"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    fields = {error["loc"][-1] for error in body["details"]}
    assert {"name", "mobile", "email", "password"} <= fields


def test_mobile_verification_scenario(client, store, sms):
    register(client)

    response = client.post(f"{PREFIX}/send-otp", json={"mobile": "9991112222"})
    assert response.status_code == 200
    assert sms.sent[0][0] == "9991112222"
    assert sms.sent[0][1].startswith("Your OTP for mobile verification is ")
    code = sms.last_code

    response = client.post(f"{PREFIX}/verify-otp", json={"mobile": "9991112222", "otp": code})
    assert response.status_code == 200
    assert response.json()["msg"] == "OTP verified successfully"

    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "Max-Age=3600" in cookie
    document = only_user(store)
    assert decode_access_token(response.cookies[settings.SESSION_COOKIE_NAME]) == document["_id"]
    assert document["is_verified"] is True
    assert "otp" not in document

    response = client.post(f"{PREFIX}/verify-otp", json={"mobile": "9991112222", "otp": code})
    assert response.status_code == 400
    assert response.json()["code"] == "OTP_NOT_FOUND"


def test_verify_otp_wrong_code_then_right_code(client, sms):
    register(client)
    client.post(f"{PREFIX}/send-otp", json={"mobile": "9991112222"})
    code = sms.last_code
    wrong = "000000" if code != "000000" else "111111"

    response = client.post(f"{PREFIX}/verify-otp", json={"mobile": "9991112222", "otp": wrong})
    assert response.status_code == 400
    assert response.json()["code"] == "OTP_MISMATCH"
    assert response.json()["error"] == "Invalid OTP"

    response = client.post(f"{PREFIX}/verify-otp", json={"mobile": "9991112222", "otp": code})
    assert response.status_code == 200


def test_verify_otp_after_expiry(client, clock, sms):
    register(client)
    client.post(f"{PREFIX}/send-otp", json={"mobile": "9991112222"})
    clock.advance(minutes=11)

    response = client.post(f"{PREFIX}/verify-otp", json={"mobile": "9991112222", "otp": sms.last_code})

    assert response.status_code == 400
    assert response.json()["code"] == "OTP_EXPIRED"


def test_send_otp_unknown_mobile(client, sms):
    response = client.post(f"{PREFIX}/send-otp", json={"mobile": "9991112222"})

    assert response.status_code == 400
    assert response.json()["code"] == "NOT_FOUND"
    assert sms.sent == []


def test_send_otp_delivery_failure(client, store, sms):
    register(client)
    sms.fail = True

    response = client.post(f"{PREFIX}/send-otp", json={"mobile": "9991112222"})

    assert response.status_code == 500
    assert response.json()["code"] == "DELIVERY_FAILED"
    # The challenge was issued before delivery was attempted
    assert "otp" in only_user(store)


def test_set_pin_once(client, store, sms):
    register(client)
    client.post(f"{PREFIX}/send-otp", json={"mobile": "9991112222"})
    client.post(f"{PREFIX}/verify-otp", json={"mobile": "9991112222", "otp": sms.last_code})

    response = client.post(f"{PREFIX}/set-pin", json={"pin": "1234"})
    assert response.status_code == 200
    assert response.json()["msg"] == "PIN set successfully"
    pin_hash = only_user(store)["pin_hash"]
    assert pin_hash != "1234"
    assert verify_password("1234", pin_hash)

    response = client.post(f"{PREFIX}/set-pin", json={"pin": "9876"})
    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"
    assert only_user(store)["pin_hash"] == pin_hash


def test_set_pin_with_bearer_token(client):
    register(client)
    token = client.post(
        f"{PREFIX}/login", json={"mobile": "9991112222", "password": "secret1"}
    ).json()["access_token"]

    response = client.post(
        f"{PREFIX}/set-pin",
        json={"pin": "4321"},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 200


def test_set_pin_requires_session(client):
    response = client.post(f"{PREFIX}/set-pin", json={"pin": "1234"})

    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_set_pin_rejects_tampered_token(client):
    response = client.post(
        f"{PREFIX}/set-pin",
        json={"pin": "1234"},
        headers={"Authorization": "Bearer not.a.token"},
    )

    assert response.status_code == 401


def test_set_pin_validates_format(client):
    register(client)
    token = client.post(
        f"{PREFIX}/login", json={"mobile": "9991112222", "password": "secret1"}
    ).json()["access_token"]

    for pin in ("12a4", "123", "12345"):
        response = client.post(
            f"{PREFIX}/set-pin",
            json={"pin": pin},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 422


def test_password_reset_flow(client, store, email):
    register(client)

    response = client.post(f"{PREFIX}/forgot-password", json={"email": "asha@example.com"})
    assert response.status_code == 200
    to_email, subject, _ = email.sent[0]
    assert to_email == "asha@example.com"
    assert subject == "Reset Password OTP"

    response = client.post(
        f"{PREFIX}/reset-password",
        json={"email": "asha@example.com", "otp": email.last_code, "password": "newpass1"},
    )
    assert response.status_code == 200
    assert response.json()["msg"] == "Password reset successfully"
    assert "otp" not in only_user(store)

    assert client.post(
        f"{PREFIX}/login", json={"mobile": "9991112222", "password": "secret1"}
    ).status_code == 401
    assert client.post(
        f"{PREFIX}/login", json={"mobile": "9991112222", "password": "newpass1"}
    ).status_code == 200


def test_reset_password_wrong_code_keeps_password(client, store, email):
    register(client)
    client.post(f"{PREFIX}/forgot-password", json={"email": "asha@example.com"})
    old_hash = only_user(store)["password_hash"]
    wrong = "000000" if email.last_code != "000000" else "111111"

    response = client.post(
        f"{PREFIX}/reset-password",
        json={"email": "asha@example.com", "otp": wrong, "password": "newpass1"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "OTP_MISMATCH"
    assert only_user(store)["password_hash"] == old_hash


def test_forgot_password_unknown_email(client, email):
    response = client.post(f"{PREFIX}/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 400
    assert response.json()["code"] == "NOT_FOUND"
    assert email.sent == []


def test_forgot_password_delivery_failure(client, email):
    register(client)
    email.fail = True

    response = client.post(f"{PREFIX}/forgot-password", json={"email": "asha@example.com"})

    assert response.status_code == 500
    assert response.json()["code"] == "DELIVERY_FAILED"


def test_login_returns_token_without_verification(client, store):
    register(client)

    response = client.post(f"{PREFIX}/login", json={"mobile": "9991112222", "password": "secret1"})

    assert response.status_code == 200
    body = response.json()
    assert body["msg"] == "Logged in"
    assert body["token_type"] == "bearer"
    assert decode_access_token(body["access_token"]) == only_user(store)["_id"]


def test_login_failures(client):
    register(client)

    wrong_password = client.post(f"{PREFIX}/login", json={"mobile": "9991112222", "password": "nope12"})
    unknown_user = client.post(f"{PREFIX}/login", json={"mobile": "8887776666", "password": "secret1"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json()["code"] == "AUTHENTICATION_FAILED"
