# gadget_api/core/security.py
""""封装口令哈希/校验（passlib[bcrypt]）与 JWT 签发/解码（PyJWT, HS256）。

- 签名秘钥不在这里缓存：由调用方显式传入（启动时从 SECRET_KEY 读取一次）
- 令牌有效期固定 7 天（TOKEN_TTL），负载：sub=username / username / iat / exp
- dummy_verify()：用户不存在时也跑一次 bcrypt，抹平响应时间差"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt  # PyJWT
from passlib.context import CryptContext

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(days=7)
MAX_PASSWORD_BYTES = 72


def get_bcrypt_rounds() -> int:
    try:
        return int(os.getenv("BCRYPT_ROUNDS", "12"))
    except Exception:
        return 12


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=get_bcrypt_rounds())


def get_secret_key() -> str:
    key = os.getenv("SECRET_KEY")
    if not key:
        raise RuntimeError("SECRET_KEY is not set in environment")
    return key


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    pwd_context.dummy_verify()


def password_too_long(plain: str) -> bool:
    # bcrypt 只看前 72 个字节（UTF-8），超出部分会被截断
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def create_access_token(username: str, secret_key: str, issued_at: Optional[datetime] = None) -> str:
    iat = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "username": username,
        "iat": iat,
        "exp": iat + TOKEN_TTL,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> Dict[str, Any]:
    """校验签名与过期时间；失败时原样抛出 PyJWT 异常，由认证服务归类。"""
    return jwt.decode(
        token,
        secret_key,
        algorithms=[ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
