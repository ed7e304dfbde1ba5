"""User API tests.

Learn: Tests cover:
1. Registration + duplicate prevention + validation
2. Login → token cookie and body token
3. Logout clears the cookie
4. Profile update (requires current password)
5. Address book add / update / delete
6. Password change, then login with the new password only
"""

import pytest

USER = "/api/v2/user"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def _register(client, email="grace@example.com", password="pw-1234"):
    r = await client.post(
        f"{USER}/create-user",
        json={
            "name": "Grace",
            "email": email,
            "password": password,
            "avatar": "avatars/grace.png",
        },
    )
    assert r.status_code == 201
    return r.json()


async def _login(client, email="grace@example.com", password="pw-1234"):
    r = await client.post(
        f"{USER}/login-user", json={"email": email, "password": password}
    )
    assert r.status_code == 200
    return r.json()["token"]


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    user = await _register(client)
    assert user["email"] == "grace@example.com"
    assert user["role"] == "user"
    assert user["addresses"] == []
    assert "password" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await _register(client)
    r = await client.post(
        f"{USER}/create-user",
        json={
            "name": "Other",
            "email": "grace@example.com",
            "password": "pw-9999",
            "avatar": "a.png",
        },
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(client):
    r = await client.post(
        f"{USER}/create-user",
        json={"name": "S", "email": "s@example.com", "password": "abc", "avatar": "a.png"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_register_requires_avatar(client):
    r = await client.post(
        f"{USER}/create-user",
        json={"name": "S", "email": "s@example.com", "password": "abcd"},
    )
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Login / logout
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_sets_httponly_cookie(client):
    await _register(client)
    r = await client.post(
        f"{USER}/login-user",
        json={"email": "grace@example.com", "password": "pw-1234"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "grace@example.com"

    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith(f"token={body['token']}")
    assert "HttpOnly" in set_cookie
    assert f"Max-Age={7 * 24 * 3600}" in set_cookie


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    await _register(client)
    r = await client.post(
        f"{USER}/login-user",
        json={"email": "grace@example.com", "password": "wrong"},
    )
    assert r.status_code == 400
    assert "set-cookie" not in r.headers


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    r = await client.post(
        f"{USER}/login-user", json={"email": "nobody@example.com", "password": "x"}
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_login_token_reaches_getuser(client):
    created = await _register(client)
    token = await _login(client)
    client.cookies.clear()

    r = await client.get(f"{USER}/getuser", headers=_bearer(token))
    assert r.status_code == 200
    assert r.json()["id"] == created["id"]


@pytest.mark.asyncio
async def test_logout_clears_cookie(client):
    r = await client.get(f"{USER}/logout")
    assert r.status_code == 200
    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith('token=""')
    assert "Max-Age=0" in set_cookie


# ═══════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_user_info(client, user):
    r = await client.put(
        f"{USER}/update-user-info",
        headers=_bearer(user.get_jwt_token()),
        json={
            "email": "ada.l@example.com",
            "password": "secret-pw",
            "phone_number": "5550142",
            "name": "Ada L.",
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "ada.l@example.com"
    assert body["phone_number"] == "5550142"
    assert body["name"] == "Ada L."


@pytest.mark.asyncio
async def test_update_user_info_wrong_password(client, user):
    r = await client.put(
        f"{USER}/update-user-info",
        headers=_bearer(user.get_jwt_token()),
        json={"email": user.email, "password": "nope", "name": "Mallory"},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_user_info_requires_login(client):
    r = await client.put(
        f"{USER}/update-user-info",
        json={"email": "a@example.com", "password": "x", "name": "x"},
    )
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Addresses
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_address_add_update_delete(client, user):
    headers = _bearer(user.get_jwt_token())
    home = {
        "country": "FR",
        "city": "Paris",
        "address1": "1 Rue de Rivoli",
        "address2": "",
        "zip_code": "75001",
        "address_type": "Home",
    }

    r = await client.put(f"{USER}/update-user-addresses", headers=headers, json=home)
    assert r.status_code == 200
    addresses = r.json()["addresses"]
    assert len(addresses) == 1
    home_id = addresses[0]["id"]

    r = await client.put(
        f"{USER}/update-user-addresses",
        headers=headers,
        json={**home, "address_type": "Office", "city": "Lyon"},
    )
    assert [a["address_type"] for a in r.json()["addresses"]] == ["Home", "Office"]

    # Update in place by id
    r = await client.put(
        f"{USER}/update-user-addresses",
        headers=headers,
        json={**home, "id": home_id, "city": "Versailles"},
    )
    assert r.status_code == 200
    assert r.json()["addresses"][0]["city"] == "Versailles"
    assert len(r.json()["addresses"]) == 2

    r = await client.delete(f"{USER}/delete-user-address/{home_id}", headers=headers)
    assert r.status_code == 200
    assert [a["address_type"] for a in r.json()["addresses"]] == ["Office"]


@pytest.mark.asyncio
async def test_duplicate_address_type_rejected(client, user):
    headers = _bearer(user.get_jwt_token())
    body = {"city": "Paris", "address_type": "Home"}
    r = await client.put(f"{USER}/update-user-addresses", headers=headers, json=body)
    assert r.status_code == 200

    r = await client.put(f"{USER}/update-user-addresses", headers=headers, json=body)
    assert r.status_code == 400
    assert r.json()["detail"] == "Home address already exists"


@pytest.mark.asyncio
async def test_delete_unknown_address(client, user):
    r = await client.delete(
        f"{USER}/delete-user-address/00000000-0000-0000-0000-000000000000",
        headers=_bearer(user.get_jwt_token()),
    )
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Password change
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_password(client):
    await _register(client)
    token = await _login(client)
    client.cookies.clear()

    r = await client.put(
        f"{USER}/update-user-password",
        headers=_bearer(token),
        json={
            "old_password": "pw-1234",
            "new_password": "pw-5678",
            "confirm_password": "pw-5678",
        },
    )
    assert r.status_code == 200

    r = await client.post(
        f"{USER}/login-user",
        json={"email": "grace@example.com", "password": "pw-1234"},
    )
    assert r.status_code == 400
    await _login(client, password="pw-5678")


@pytest.mark.asyncio
async def test_update_password_wrong_old_password(client, user):
    r = await client.put(
        f"{USER}/update-user-password",
        headers=_bearer(user.get_jwt_token()),
        json={
            "old_password": "not-it",
            "new_password": "pw-5678",
            "confirm_password": "pw-5678",
        },
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Old password is incorrect!"


@pytest.mark.asyncio
async def test_update_password_confirmation_mismatch(client, user):
    r = await client.put(
        f"{USER}/update-user-password",
        headers=_bearer(user.get_jwt_token()),
        json={
            "old_password": "secret-pw",
            "new_password": "pw-5678",
            "confirm_password": "pw-0000",
        },
    )
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Partial updates and unknown ids
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_user_info_without_phone_keeps_it(client, user):
    headers = _bearer(user.get_jwt_token())
    r = await client.put(
        f"{USER}/update-user-info",
        headers=headers,
        json={
            "email": user.email,
            "password": "secret-pw",
            "phone_number": "5550142",
            "name": "Ada",
        },
    )
    assert r.status_code == 200

    r = await client.put(
        f"{USER}/update-user-info",
        headers=headers,
        json={"email": user.email, "password": "secret-pw", "name": "Ada L."},
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Ada L."
    assert r.json()["phone_number"] == "5550142"


@pytest.mark.asyncio
async def test_update_address_with_unknown_id(client, user):
    headers = _bearer(user.get_jwt_token())
    r = await client.put(
        f"{USER}/update-user-addresses",
        headers=headers,
        json={
            "id": "00000000-0000-0000-0000-000000000000",
            "city": "Paris",
            "address_type": "Home",
        },
    )
    assert r.status_code == 404

    r = await client.get(f"{USER}/getuser", headers=headers)
    assert r.json()["addresses"] == []
