"""
模块职能：
- 注册：bcrypt 哈希后落库，用户名唯一（先查重；并发插入撞唯一键同样归为 DuplicateUsername）
- 登录：校验口令并签发 7 天有效的 JWT（sub=username）
- 令牌校验：无状态，只依赖签名秘钥

签名秘钥由调用方显式传入（启动时读取一次），这里不读环境变量。

日志（通过 emit 发出，不记录明文口令与 token）：
- auth_register_ok / auth_register_duplicate
- auth_login_success / auth_login_failed（reason：unknown_user / bad_password，仅内部区分）
- auth_token_missing / auth_token_expired / auth_token_invalid
"""
from datetime import datetime
from typing import Optional

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gadget_api.core.context import Identity, RequestContext
from gadget_api.core.errors import (
    DuplicateUsername, InvalidInput, InvalidCredentials, InvalidToken, MissingToken, UnknownUser,
)
from gadget_api.core.models_user import User
from gadget_api.core.security import (
    MAX_PASSWORD_BYTES, create_access_token, decode_access_token, dummy_verify, hash_password,
    password_too_long, verify_password,
)
from gadget_api.core.validation import require_text
from gadget_api.infra.logger import emit


def register(db: Session, rctx: RequestContext, username: str, password: str) -> User:
    username = require_text(username, "username")
    password = require_text(password, "password")
    if password_too_long(password):
        raise InvalidInput(f"password must be at most {MAX_PASSWORD_BYTES} bytes", field="password")

    if db.query(User).filter(User.username == username).first():
        emit("auth_register_duplicate", request_id=rctx.request_id, username=username)
        raise DuplicateUsername(username=username)

    user = User(username=username, password_hash=hash_password(password))
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # 查重与插入之间被并发注册抢先
        db.rollback()
        emit("auth_register_duplicate", request_id=rctx.request_id, username=username, race=True)
        raise DuplicateUsername(username=username)

    emit("auth_register_ok", request_id=rctx.request_id, user_id=user.id, username=username)
    return user


def login(
    db: Session,
    rctx: RequestContext,
    username: str,
    password: str,
    secret_key: str,
    issued_at: Optional[datetime] = None,
) -> str:
    emit("auth_login_attempt", request_id=rctx.request_id, username=username)

    user = db.query(User).filter(User.username == username).first()
    if not user:
        # 用户不存在也跑一次 bcrypt，避免通过响应时间枚举用户名
        dummy_verify()
        emit("auth_login_failed", request_id=rctx.request_id, username=username, reason="unknown_user")
        raise UnknownUser(username=username)
    if password_too_long(password):
        # 注册时已拒绝超长口令，这里直接判失败；仍跑一次 bcrypt 抹平耗时
        dummy_verify()
        emit("auth_login_failed", request_id=rctx.request_id, username=username, reason="password_too_long")
        raise InvalidCredentials(username=username)
    if not verify_password(password, user.password_hash):
        emit("auth_login_failed", request_id=rctx.request_id, username=username, reason="bad_password")
        raise InvalidCredentials(username=username)

    token = create_access_token(user.username, secret_key, issued_at=issued_at)
    emit("auth_login_success", request_id=rctx.request_id, user_id=user.id, username=user.username)
    return token


def verify_token(token: Optional[str], secret_key: str, rctx: Optional[RequestContext] = None) -> Identity:
    rid = rctx.request_id if rctx else None
    if not token:
        emit("auth_token_missing", request_id=rid)
        raise MissingToken()
    try:
        payload = decode_access_token(token, secret_key)
    except jwt.ExpiredSignatureError:
        emit("auth_token_expired", request_id=rid)
        raise InvalidToken()
    except jwt.PyJWTError as e:
        emit("auth_token_invalid", request_id=rid, error=str(e))
        raise InvalidToken()

    ident = Identity.from_payload(payload)
    if not ident.username:
        emit("auth_token_invalid", request_id=rid, error="empty subject")
        raise InvalidToken()
    return ident
