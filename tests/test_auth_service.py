""""认证服务：重复注册、登录失败文案一致、令牌往返与 7 天过期边界。"""
# tests/test_auth_service.py
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from gadget_api.core.errors import (
    DuplicateUsername, InvalidCredentials, InvalidInput, InvalidToken, MissingToken, UnknownUser,
)
from gadget_api.core.models_user import User
from gadget_api.core.security import ALGORITHM, TOKEN_TTL, create_access_token, verify_password
from gadget_api.services import auth as auth_svc


def test_register_stores_hash_not_plaintext(db, rctx):
    user = auth_svc.register(db, rctx, "alice", "pw1")
    assert user.id
    assert user.password_hash != "pw1"
    assert verify_password("pw1", user.password_hash)


def test_duplicate_registration_keeps_first_hash(db, rctx):
    auth_svc.register(db, rctx, "alice", "pw1")
    with pytest.raises(DuplicateUsername):
        auth_svc.register(db, rctx, "alice", "pw2")

    rows = db.query(User).filter(User.username == "alice").all()
    assert len(rows) == 1
    assert verify_password("pw1", rows[0].password_hash)
    assert not verify_password("pw2", rows[0].password_hash)


def test_login_failures_share_public_message(db, rctx, secret):
    auth_svc.register(db, rctx, "alice", "pw1")

    with pytest.raises(InvalidCredentials) as wrong_pw:
        auth_svc.login(db, rctx, "alice", "wrong", secret)
    with pytest.raises(UnknownUser) as unknown:
        auth_svc.login(db, rctx, "bob_never_registered", "x", secret)

    assert wrong_pw.value.message == unknown.value.message == "Invalid username or password"
    assert wrong_pw.value.status_code == unknown.value.status_code == 401
    assert wrong_pw.value.kind != unknown.value.kind


def test_token_round_trip(db, rctx, secret):
    auth_svc.register(db, rctx, "alice", "pw1")
    token = auth_svc.login(db, rctx, "alice", "pw1", secret)

    ident = auth_svc.verify_token(token, secret)
    assert ident.username == "alice"

    payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    assert payload["sub"] == "alice"
    assert payload["exp"] - payload["iat"] == int(TOKEN_TTL.total_seconds())


def test_token_valid_just_before_seven_days(secret):
    issued = datetime.now(timezone.utc) - TOKEN_TTL + timedelta(minutes=5)
    token = create_access_token("alice", secret, issued_at=issued)
    assert auth_svc.verify_token(token, secret).username == "alice"


def test_token_expires_after_seven_days(db, rctx, secret):
    auth_svc.register(db, rctx, "alice", "pw1")
    issued = datetime.now(timezone.utc) - TOKEN_TTL - timedelta(seconds=5)
    token = auth_svc.login(db, rctx, "alice", "pw1", secret, issued_at=issued)

    with pytest.raises(InvalidToken):
        auth_svc.verify_token(token, secret)


def test_token_signed_with_other_key_is_rejected(secret):
    token = create_access_token("alice", "another-signing-key-0123456789abcdef0123")
    with pytest.raises(InvalidToken):
        auth_svc.verify_token(token, secret)


@pytest.mark.parametrize("token", ["", None])
def test_missing_token(token, secret):
    with pytest.raises(MissingToken):
        auth_svc.verify_token(token, secret)


def test_garbage_token(secret):
    with pytest.raises(InvalidToken):
        auth_svc.verify_token("not.a.jwt", secret)


def test_token_without_subject_is_rejected(secret):
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"exp": exp, "username": "alice"}, secret, algorithm=ALGORITHM)
    with pytest.raises(InvalidToken):
        auth_svc.verify_token(token, secret)


def test_register_limit_counts_bytes_not_chars(db, rctx):
    # "é" 在 UTF-8 下占 2 字节：30 个 = 60 字节可注册，40 个 = 80 字节超限
    assert auth_svc.register(db, rctx, "alice", "é" * 30).id
    with pytest.raises(InvalidInput):
        auth_svc.register(db, rctx, "bob", "é" * 40)
    assert db.query(User).filter(User.username == "bob").count() == 0


def test_login_with_overlong_password_is_plain_credential_failure(db, rctx, secret):
    auth_svc.register(db, rctx, "alice", "pw1")
    with pytest.raises(InvalidCredentials) as ei:
        auth_svc.login(db, rctx, "alice", "x" * 100, secret)
    assert ei.value.message == "Invalid username or password"
    assert ei.value.status_code == 401
