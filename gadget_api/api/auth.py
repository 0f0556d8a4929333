# gadget_api/api/auth.py
"""
注册 / 登录 / 当前身份

- POST /register：201，data 为空列表
- POST /login：200，data = {"token": "<JWT>"}（HS256，7 天有效）
- GET  /me：校验 Bearer 令牌，data = {"username": ...}

登录失败对外统一为 "Invalid username or password"（401），
“用户不存在”与“口令错误”只在日志 auth_login_failed.reason 里区分。
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from gadget_api.api.deps.auth import get_identity, get_signing_key
from gadget_api.api.envelope import respond
from gadget_api.core.context import Identity, RequestContext, get_request_context
from gadget_api.core.security import MAX_PASSWORD_BYTES, password_too_long
from gadget_api.infra.db import get_db
from gadget_api.services import auth as auth_svc

router = APIRouter(tags=["auth"])


class RegisterIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def _bcrypt_limit(cls, v: str) -> str:
        # bcrypt 的上限按 UTF-8 字节计，不按字符
        if password_too_long(v):
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1, max_length=255)
    # 登录不限长度：超长口令交给服务层，统一返回 401
    password: str = Field(min_length=1)


@router.post("/register", status_code=201)
def register(
    body: RegisterIn,
    db: Session = Depends(get_db),
    rctx: RequestContext = Depends(get_request_context),
):
    auth_svc.register(db, rctx, body.username, body.password)
    return respond(rctx, message="User registered successfully.", status_code=201)


@router.post("/login")
def login(
    body: LoginIn,
    db: Session = Depends(get_db),
    secret_key: str = Depends(get_signing_key),
    rctx: RequestContext = Depends(get_request_context),
):
    token = auth_svc.login(db, rctx, body.username, body.password, secret_key)
    return respond(rctx, data={"token": token}, message="Login successful.")


@router.get("/me")
def whoami(
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    return respond(rctx, data={"username": ident.username})
