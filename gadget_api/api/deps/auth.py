# gadget_api/api/deps/auth.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gadget_api.core.context import Identity, RequestContext, get_request_context
from gadget_api.core.security import get_secret_key
from gadget_api.services import auth as auth_svc

bearer_scheme = HTTPBearer(auto_error=False)


def get_signing_key(request: Request) -> str:
    # lifespan 启动时读取一次并挂在 app.state 上；未启动 lifespan 时退回环境变量
    key = getattr(request.app.state, "secret_key", None)
    if not key:
        key = get_secret_key()
        request.app.state.secret_key = key
    return key


def get_identity(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    secret_key: str = Depends(get_signing_key),
    rctx: RequestContext = Depends(get_request_context),
) -> Identity:
    """
    从 Authorization: Bearer <token> 解析出当前调用者。
    缺失 → MissingToken；签名/格式/过期问题 → InvalidToken（均由全局处理器渲染为 401）。
    """
    token = creds.credentials if creds else None
    return auth_svc.verify_token(token, secret_key, rctx)
