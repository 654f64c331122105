import pytest

from carejourney.api import uploads
from carejourney.core.exceptions import ExternalServiceError
from carejourney.services import token_service

from helpers import PASSWORD, auth_headers, png_file, sign_in, sign_up


@pytest.fixture
def fixed_codes(monkeypatch):
    monkeypatch.setattr(token_service, "generate_otp", lambda: "123456")
    monkeypatch.setattr(token_service, "generate_reset_token", lambda: "reset-token-abc")


def test_create_user_returns_public_fields(client):
    user = sign_up(client)
    assert user["name"] == "Jane"
    assert user["email"] == "jane@example.com"
    assert "password" not in user
    assert len(user["id"]) == 24


def test_create_user_rejects_duplicate_email(client):
    sign_up(client)
    response = client.post("/auth/create", json={"name": "Jo", "email": "JANE@example.com", "password": PASSWORD})
    assert response.status_code == 409
    assert response.json()["error"] == "Email is already in use!"


@pytest.mark.parametrize("password, message", [
    ("short1!", "Password is too short!"),
    ("password1", "Password must contain at least one letter, one number, and one special character (!@#$%^&*)."),
])
def test_create_user_password_rules(client, password, message):
    response = client.post("/auth/create", json={"name": "Jane", "email": "jane@example.com", "password": password})
    assert response.status_code == 422
    assert response.json()["error"] == message


def test_verify_email_flow(client, fixed_codes):
    user = sign_up(client)

    wrong = client.post("/auth/verify-email", json={"userId": user["id"], "token": "000000"})
    assert wrong.status_code == 403

    response = client.post("/auth/verify-email", json={"userId": user["id"], "token": "123456"})
    assert response.status_code == 200

    profile = sign_in(client)["profile"]
    assert profile["verified"] is True

    # The code is single use
    again = client.post("/auth/verify-email", json={"userId": user["id"], "token": "123456"})
    assert again.status_code == 403


def test_re_verify_email_rejects_verified_account(client, fixed_codes):
    user = sign_up(client)
    assert client.post("/auth/re-verify-email", json={"userId": user["id"]}).status_code == 200

    client.post("/auth/verify-email", json={"userId": user["id"], "token": "123456"})
    response = client.post("/auth/re-verify-email", json={"userId": user["id"]})
    assert response.status_code == 422
    assert response.json()["error"] == "Your account is already verified!"


def test_invalid_user_id_is_rejected(client):
    response = client.post("/auth/re-verify-email", json={"userId": "not-an-id"})
    assert response.status_code == 422


def test_sign_in_mismatch(client):
    sign_up(client)
    response = client.post("/auth/sign-in", json={"email": "jane@example.com", "password": "Wrong0ne!"})
    assert response.status_code == 403
    assert response.json()["error"] == "Email/Password mismatch!"
    assert response.json()["code"] == "UNAUTHORIZED"


def test_is_auth_and_log_out(client):
    sign_up(client)
    body = sign_in(client)
    headers = auth_headers(body["token"])

    response = client.get("/auth/is-auth", headers=headers)
    assert response.status_code == 200
    assert response.json()["profile"]["email"] == "jane@example.com"

    assert client.post("/auth/log-out", headers=headers).status_code == 200
    assert client.get("/auth/is-auth", headers=headers).status_code == 403


def test_log_out_from_all_devices(client):
    sign_up(client)
    first = auth_headers(sign_in(client)["token"])
    second = auth_headers(sign_in(client)["token"])

    assert client.post("/auth/log-out?fromAll=yes", headers=first).status_code == 200
    assert client.get("/auth/is-auth", headers=first).status_code == 403
    assert client.get("/auth/is-auth", headers=second).status_code == 403


def test_garbage_token_is_rejected(client):
    response = client.get("/auth/is-auth", headers=auth_headers("not.a.jwt"))
    assert response.status_code == 403


def test_password_reset_flow(client, fixed_codes):
    user = sign_up(client)
    old_session = auth_headers(sign_in(client)["token"])

    assert client.post("/auth/forget-password", json={"email": "jane@example.com"}).status_code == 200

    bad = client.post("/auth/verify-pass-reset-token", json={"userId": user["id"], "token": "nope"})
    assert bad.status_code == 403
    assert bad.json()["error"] == "Unauthorized access, Invalid Request !"

    good = client.post("/auth/verify-pass-reset-token", json={"userId": user["id"], "token": "reset-token-abc"})
    assert good.status_code == 200
    assert good.json() == {"valid": True}

    same = client.post("/auth/update-password", json={
        "userId": user["id"], "token": "reset-token-abc", "password": PASSWORD
    })
    assert same.status_code == 422
    assert same.json()["error"] == "The new password must be different!"

    response = client.post("/auth/update-password", json={
        "userId": user["id"], "token": "reset-token-abc", "password": "N3wPass!"
    })
    assert response.status_code == 200

    # Existing sessions are signed out and the token is consumed
    assert client.get("/auth/is-auth", headers=old_session).status_code == 403
    sign_in(client, password="N3wPass!")
    reuse = client.post("/auth/verify-pass-reset-token", json={"userId": user["id"], "token": "reset-token-abc"})
    assert reuse.status_code == 403


def test_forget_password_unknown_email(client):
    response = client.post("/auth/forget-password", json={"email": "ghost@example.com"})
    assert response.status_code == 404


def test_update_profile_only_changes_sent_fields(client, signed_in):
    _, headers = signed_in
    response = client.post("/auth/update-profile", headers=headers, json={
        "userType": "caregiver",
        "cancerType": "breast",
        "stage": "II",
    })
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["userType"] == "caregiver"
    assert profile["cancerType"] == "breast"
    assert profile["stage"] == "II"
    assert profile["name"] == "Jane"


def test_update_profile_rejects_unknown_user_type(client, signed_in):
    _, headers = signed_in
    response = client.post("/auth/update-profile", headers=headers, json={"userType": "doctor"})
    assert response.status_code == 422
    assert response.json()["error"] == "Invalid user type!"


def test_update_avatar_replaces_previous_object(client, signed_in, storage):
    _, headers = signed_in

    first = client.post("/auth/update-avatar", headers=headers, files={"avatar": png_file()})
    assert first.status_code == 200
    first_url = first.json()["profile"]["avatar"]
    assert first_url.startswith("https://cdn.test/")
    storage.delete_object.assert_not_awaited()

    second = client.post("/auth/update-avatar", headers=headers, files={"avatar": png_file()})
    assert second.status_code == 200
    storage.delete_object.assert_awaited_once()
    assert first_url.endswith(storage.delete_object.await_args.args[0])


def test_update_push_token(client, signed_in, database):
    profile, headers = signed_in
    response = client.post("/auth/update-push-token", headers=headers, json={"expoPushToken": "ExponentPushToken[x]"})
    assert response.status_code == 200
    assert client.get("/auth/is-auth", headers=headers).json()["profile"]["expoPushToken"] == "ExponentPushToken[x]"


def test_update_avatar_keeps_new_avatar_when_old_delete_fails(client, signed_in, storage, monkeypatch):
    _, headers = signed_in
    keys = iter(["u/profile-1", "u/profile-2"])
    monkeypatch.setattr(uploads, "build_object_key", lambda user_id, kind: next(keys))
    client.post("/auth/update-avatar", headers=headers, files={"avatar": png_file()})
    storage.delete_object.side_effect = ExternalServiceError("Failed to delete the file")

    response = client.post("/auth/update-avatar", headers=headers, files={"avatar": png_file(name="new.png")})
    assert response.status_code == 200
    storage.delete_object.assert_awaited_once_with("u/profile-1")
    new_url = response.json()["profile"]["avatar"]
    assert client.get("/auth/is-auth", headers=headers).json()["profile"]["avatar"] == new_url
