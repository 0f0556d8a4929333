"""
模块职责：请求级日志中间件。
- 为每个请求生成 request_id，挂到 request.state（依赖 get_request_context 读取，写进响应信封 meta）；
- 记录 request_start 与 request_end（含耗时、状态码）；
- 写一条 type=REQUEST 的 HTTP 流水（带 body，password / token / Authorization 打码）；
- 捕获异常并输出 request_error，随后抛出让 FastAPI 处理。
"""
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from gadget_api.infra.logger import decode_body, emit, log_request, now_iso

_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/favicon.ico":
            return await call_next(request)

        rid = str(uuid.uuid4())
        request.state.request_id = rid
        request.state.started_at = now_iso()
        start = time.perf_counter()
        emit(
            "request_start",
            request_id=rid,
            method=request.method,
            path=str(request.url.path),
            query=str(request.url.query),
            ip=str(request.client.host) if request.client else None,
            ua=request.headers.get("user-agent"),
        )
        # Starlette 会缓存 body，下游路由仍可再次读取
        body = await request.body() if request.method in _BODY_METHODS else b""
        log_request(
            rid, request.method, str(request.url.path), str(request.url.query),
            body=decode_body(body), headers=request.headers,
        )
        try:
            response: Response = await call_next(request)
            dur_ms = round((time.perf_counter() - start) * 1000, 2)
            emit(
                "request_end",
                request_id=rid,
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
                duration_ms=dur_ms,
            )
            # 便于链路追踪，在响应头带上 request_id（与信封 meta.requestID 一致）
            response.headers["x-request-id"] = rid
            return response
        except Exception as e:
            dur_ms = round((time.perf_counter() - start) * 1000, 2)
            emit(
                "request_error",
                request_id=rid,
                method=request.method,
                path=str(request.url.path),
                error=repr(e),
                duration_ms=dur_ms,
            )
            raise
