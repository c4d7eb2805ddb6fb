import base64
import string

import bcrypt
import pytest

from cogniflight.security import check_password, generate_token, hash_password

password = "password"
URL_SAFE = set(string.ascii_letters + string.digits + "-_")


def test_token_is_unpadded_url_safe_base64_of_32_bytes():
    token = generate_token()
    assert set(token) <= URL_SAFE
    assert "=" not in token
    assert len(base64.urlsafe_b64decode(token + "=")) == 32


def test_tokens_are_distinct():
    tokens = {generate_token() for _ in range(20)}
    assert len(tokens) == 20


def test_hash_then_check():
    hashed = hash_password(password)
    assert check_password(hashed, password)
    assert not check_password(hashed, "secret")


def test_hash_uses_default_cost_and_fresh_salt():
    first = hash_password(password)
    second = hash_password(password)
    assert first.split("$")[2] == "10"
    assert first != second


def test_overlong_password_rejected():
    with pytest.raises(ValueError):
        hash_password("x" * 73)


def test_malformed_hash_does_not_match():
    assert check_password("placeholder", password) is False


def test_accepts_2a_prefixed_hash():
    hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4, prefix=b"2a")).decode()
    assert hashed.startswith("$2a$")
    assert check_password(hashed, password)