"""bcrypt helpers."""

from storefront.auth.password import hash_password, verify_password


def test_hash_is_salted_bcrypt():
    h1 = hash_password("hunter22")
    h2 = hash_password("hunter22")
    assert h1.startswith("$2")
    assert h1 != h2
    assert verify_password("hunter22", h1)
    assert verify_password("hunter22", h2)


def test_wrong_password_does_not_match():
    assert not verify_password("nope", hash_password("hunter22"))


def test_explicit_rounds_are_encoded_in_hash():
    assert hash_password("pw", rounds=5).startswith("$2b$05$")


def test_malformed_hash_fails_closed():
    assert verify_password("hunter22", "not-a-bcrypt-hash") is False
    assert verify_password("hunter22", "") is False
