"""
应用入口：
- 加载 .env（先 .env.example 作默认，再用 .env 覆盖）
- lifespan 启动阶段：配置日志 → 打印 logger_config → 读取签名秘钥（仅一次）→ 初始化数据库
- 装载请求日志中间件、全局异常处理（统一响应信封）、路由
- 提供 /、/health
"""
from pathlib import Path
from dotenv import load_dotenv

# 1) 先加载 .env，务必在导入 logger / db 之前
ROOT = Path(__file__).resolve().parents[1]
ENV = ROOT / ".env"
ENV_EXAMPLE = ROOT / ".env.example"
if ENV_EXAMPLE.exists():
    load_dotenv(ENV_EXAMPLE, override=False)
if ENV.exists():
    load_dotenv(ENV, override=True)

# 2) 正常导入
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from gadget_api.middleware.logging import RequestLoggingMiddleware
from gadget_api.infra.logger import (
    configure_logging, emit, emit_error,
    LOG_TO_FILE, LOG_DIR, LOG_FILE, LOG_ROTATE_WHEN, LOG_BACKUP_COUNT,
)
from gadget_api.infra.db import init_db
from gadget_api.api import auth as auth_api
from gadget_api.api import gadgets as gadgets_api
from gadget_api.api.envelope import respond
from gadget_api.core.context import get_request_context
from gadget_api.core.errors import AppError
from gadget_api.core.security import get_secret_key

# 3) lifespan：替代 on_event（startup/shutdown）
@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    configure_logging()
    emit(
        "logger_config",
        to_file=LOG_TO_FILE, dir=LOG_DIR, file=LOG_FILE,
        when=LOG_ROTATE_WHEN, backup=LOG_BACKUP_COUNT,
    )
    # 签名秘钥只在进程启动时读取一次；create_app 显式注入的优先
    if not app.state.secret_key:
        app.state.secret_key = get_secret_key()
    init_db()
    emit("db_init_done")
    yield
    # shutdown
    emit("app_shutdown")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = str(first.get("msg", "Invalid request"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{loc}: {msg}" if loc else msg


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        rctx = get_request_context(request)
        emit("core_error", request_id=rctx.request_id, kind=exc.kind, status_code=exc.status_code)
        return respond(rctx, message=exc.message, success=False, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        rctx = get_request_context(request)
        message = _validation_message(exc)
        emit("request_invalid", request_id=rctx.request_id, error=message)
        return respond(rctx, message=message, success=False, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        rctx = get_request_context(request)
        return respond(
            rctx, message=str(exc.detail), success=False,
            status_code=exc.status_code, headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        rctx = get_request_context(request)
        emit_error("unhandled_error", request_id=rctx.request_id, error=repr(exc))
        return respond(rctx, message="Unexpected server error", success=False, status_code=500)


# 4) 创建应用并装配（lifespan 要在这里传入）
def create_app(secret_key: Optional[str] = None) -> FastAPI:
    app = FastAPI(title="Gadget Lifecycle API", lifespan=lifespan)
    app.state.secret_key = secret_key
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url="/docs", status_code=302)

    @app.get("/health")
    def health():
        return {"ok": True}

    # 路由（无前缀：/register、/login、/gadgets ...）
    app.include_router(auth_api.router)
    app.include_router(gadgets_api.router)
    return app


app = create_app()
