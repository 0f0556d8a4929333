# gadget_api/api/envelope.py
"""
统一响应信封：
    {"success": bool, "message": str, "data": <gadget|gadget[]|{token}|[]>,
     "meta": {"time": str, "requestID": str}}

- 成功响应与错误处理器都走 respond()，保证结构一致
- 每次响应打一条 response 事件 + 一条 type=RESPONSE 流水（带 body，token 打码），
  与中间件的 REQUEST 流水通过 requestID 关联
"""
from typing import Any, Optional

from fastapi.responses import JSONResponse

from gadget_api.core.context import RequestContext
from gadget_api.infra.logger import emit, log_response


def respond(
    rctx: RequestContext,
    data: Any = None,
    message: str = "",
    success: bool = True,
    status_code: int = 200,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = {
        "success": success,
        "message": message,
        "data": [] if data is None else data,
        "meta": {"time": rctx.time, "requestID": rctx.request_id},
    }
    emit(
        "response",
        request_id=rctx.request_id,
        status_code=status_code,
        success=success,
        message=message,
    )
    log_response(rctx.request_id, status_code, body)
    return JSONResponse(status_code=status_code, content=body, headers=headers)
