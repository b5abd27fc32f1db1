from jose import jwt

from tixit.core.config import settings
from tixit.core.security import (
    ALGO,
    create_access_token,
    create_oauth_state,
    decode_token,
    hash_password,
    verify_access_token,
    verify_oauth_state,
    verify_password,
)


def test_hash_is_salted_and_never_the_plaintext():
    h1 = hash_password("secret1")
    h2 = hash_password("secret1")
    assert h1 != "secret1"
    assert h1 != h2
    assert verify_password("secret1", h1)
    assert verify_password("secret1", h2)


def test_wrong_password_does_not_verify():
    assert not verify_password("secret2", hash_password("secret1"))


def test_missing_or_garbage_hash_never_verifies():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "not-a-hash")


def test_token_binds_id_name_and_email():
    token = create_access_token("user-1", "Ann", "ann@example.com")
    payload = decode_token(token)
    assert payload["sub"] == "user-1"
    assert payload["name"] == "Ann"
    assert payload["email"] == "ann@example.com"
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600


def test_reissued_token_verifies_to_same_account():
    first = create_access_token("user-1", "Ann", "ann@example.com")
    user_id = verify_access_token(first)
    second = create_access_token(user_id, "Ann", "ann@example.com")
    assert verify_access_token(second) == "user-1"


def test_expired_token_is_unauthenticated():
    token = create_access_token("user-1", "Ann", "ann@example.com", expires_days=-1)
    assert verify_access_token(token) is None


def test_foreign_signature_is_unauthenticated():
    token = jwt.encode({"sub": "user-1"}, "some-other-secret", algorithm=ALGO)
    assert verify_access_token(token) is None


def test_tampered_token_is_unauthenticated():
    token = create_access_token("user-1", "Ann", "ann@example.com")
    head, body, sig = token.split(".")
    assert verify_access_token(f"{head}.{body}x.{sig}") is None


def test_malformed_or_missing_token_is_unauthenticated():
    assert verify_access_token(None) is None
    assert verify_access_token("") is None
    assert verify_access_token("not.a.jwt") is None


def test_token_without_subject_is_unauthenticated():
    token = jwt.encode({"name": "Ann"}, settings.SECRET_KEY, algorithm=ALGO)
    assert verify_access_token(token) is None


def test_oauth_state_round_trip():
    assert verify_oauth_state(create_oauth_state("nonce"))
    assert not verify_oauth_state(None)
    assert not verify_oauth_state("garbage")


def test_access_token_is_not_a_valid_oauth_state():
    # different purpose; must not be accepted as state even if secrets coincide
    assert not verify_oauth_state(create_access_token("user-1", "Ann", "ann@example.com"))
