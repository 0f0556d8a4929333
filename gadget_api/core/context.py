# gadget_api/core/context.py
"""
统一提供请求上下文与调用者身份。
- RequestContext：request_id（中间件生成）+ time（请求开始的本地时间）
  由依赖注入显式传入服务层与响应信封，不放全局变量
- Identity：令牌校验通过后的调用者（username）
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Request
from pydantic import BaseModel

from gadget_api.infra.logger import now_iso


class RequestContext(BaseModel):
    request_id: str
    time: str

    @classmethod
    def new(cls, request_id: Optional[str] = None) -> "RequestContext":
        # 脚本/测试直接调用服务时使用
        return cls(request_id=request_id or str(uuid.uuid4()), time=now_iso())


class Identity(BaseModel):
    username: str

    @classmethod
    def from_payload(cls, data: dict) -> "Identity":
        return cls(username=str(data.get("sub") or data.get("username") or ""))


def get_request_context(request: Request) -> RequestContext:
    rid = getattr(request.state, "request_id", None)
    started = getattr(request.state, "started_at", None)
    if not rid:
        # 没经过 RequestLoggingMiddleware（例如单独挂载的子应用）
        return RequestContext.new()
    return RequestContext(request_id=rid, time=started or now_iso())
