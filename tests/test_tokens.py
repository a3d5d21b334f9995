from datetime import timedelta

import pytest
from jose import jwt

from casetrack.exceptions import TokenInvalid
from casetrack.models.users import User, UserRole
from casetrack.utils.tokenJWT import create_access_token, decode_access_token


def _user(role="user"):
    return User(id="0b7c9a52-4f1e-4b3e-9a43-2f9d6f1d3c11", username="bob", role=role)


def test_round_trip_recovers_subject_and_role(settings):
    token = create_access_token(_user("admin"), settings)
    claims = decode_access_token(token, settings)

    assert claims.user_id == "0b7c9a52-4f1e-4b3e-9a43-2f9d6f1d3c11"
    assert claims.username == "bob"
    assert claims.role == UserRole.ADMIN
    assert claims.is_admin


def test_token_expires_after_24_hours(settings):
    token = create_access_token(_user(), settings)
    payload = jwt.get_unverified_claims(token)
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_flipped_signature_byte_is_rejected(settings):
    token = create_access_token(_user(), settings)
    header, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

    with pytest.raises(TokenInvalid):
        decode_access_token(f"{header}.{payload}.{flipped}", settings)


def test_expired_token_is_rejected(settings):
    token = create_access_token(_user(), settings, expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenInvalid):
        decode_access_token(token, settings)


def test_foreign_secret_is_rejected(settings):
    forged = jwt.encode(
        {"sub": "x", "username": "mallory", "role": "admin"}, "some-other-secret", algorithm="HS256"
    )
    with pytest.raises(TokenInvalid):
        decode_access_token(forged, settings)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_rejected(settings, token):
    with pytest.raises(TokenInvalid):
        decode_access_token(token, settings)


def test_missing_claims_are_rejected(settings):
    token = jwt.encode({"sub": "x"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(TokenInvalid):
        decode_access_token(token, settings)
