"""Tests for viewer resolution."""

import time
from types import SimpleNamespace

import pytest
from jose import jwt

from marketplace_chat.auth import decode_jwt_token, extract_viewer_from_token, get_current_viewer
from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import AuthenticationError
from tests.fakes import FakeSupabaseClient

SECRET = "test-jwt-secret"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", SECRET)


def make_token(**overrides):
    claims = {
        "sub": "user-a",
        "email": "ana@example.com",
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, SECRET, algorithm="HS256")


def test_extract_viewer_from_valid_token():
    viewer = extract_viewer_from_token(make_token())

    assert viewer.user_id == "user-a"
    assert viewer.email == "ana@example.com"
    assert not viewer.is_token_expired


def test_expired_token_rejected():
    with pytest.raises(AuthenticationError, match="expired"):
        decode_jwt_token(make_token(exp=int(time.time()) - 10))


def test_wrong_audience_rejected():
    with pytest.raises(AuthenticationError):
        decode_jwt_token(make_token(aud="anon"))


def test_bad_signature_rejected():
    forged = jwt.encode({"sub": "user-a", "aud": "authenticated"}, "other-secret", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        decode_jwt_token(forged)


def test_missing_secret(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "")

    with pytest.raises(AuthenticationError, match="not configured"):
        decode_jwt_token(make_token())


def test_empty_token():
    with pytest.raises(AuthenticationError):
        decode_jwt_token("")


async def test_current_viewer_from_client_session():
    client = FakeSupabaseClient()
    client.auth.user = SimpleNamespace(id="user-b", email="bruno@example.com", role="authenticated")

    viewer = await get_current_viewer(client)

    assert viewer.user_id == "user-b"
    assert viewer.email == "bruno@example.com"


async def test_current_viewer_without_session():
    with pytest.raises(AuthenticationError):
        await get_current_viewer(FakeSupabaseClient())
