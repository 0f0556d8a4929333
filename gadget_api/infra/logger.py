"""
统一日志配置与结构化输出（JSON 一行）。
- configure_logging(): 控制台 + 两个落盘文件，兼容 uvicorn：
    LOG_DIR/LOG_FILE       业务事件（gadget_* / auth_* / request_start ...）
    LOG_DIR/LOG_HTTP_FILE  请求/响应流水（type=REQUEST / RESPONSE，带 body）
- emit(event, **kwargs) / emit_error(...): 业务事件。
- log_request(...) / log_response(...): HTTP 流水；body 里的 password / token 一律打码。
"""
import logging, json, os, pathlib
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime


LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() == "true"
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_FILE = os.getenv("LOG_FILE", "app.log")
LOG_HTTP_FILE = os.getenv("LOG_HTTP_FILE", "http.log")
LOG_ROTATE_WHEN = os.getenv("LOG_ROTATE_WHEN", "midnight")
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "7"))
LOG_BODY_MAX = int(os.getenv("LOG_BODY_MAX", "4096"))  # 单条 body 最多记录的字节数

REDACTED = "***"
SENSITIVE_KEYS = {"password", "token", "access_token", "authorization"}

_APP_LOGGER = "gadget_api"
_HTTP_LOGGER = "gadget_api.http"

_configured = False


def _rotating(filename: str) -> TimedRotatingFileHandler:
    h = TimedRotatingFileHandler(
        os.path.join(LOG_DIR, filename),
        when=LOG_ROTATE_WHEN, backupCount=LOG_BACKUP_COUNT, encoding="utf-8",
    )
    h.setLevel(getattr(logging, LEVEL, logging.INFO))
    # 文件里只写 message（纯 JSON），便于按 request_id 关联请求与响应
    h.setFormatter(logging.Formatter("%(message)s"))
    return h


def configure_logging():
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(getattr(logging, LEVEL, logging.INFO))
    console.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    ))
    root.addHandler(console)

    if LOG_TO_FILE:
        pathlib.Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
        app_file = _rotating(LOG_FILE)
        # HTTP 流水单独成文件，不混进业务日志
        app_file.addFilter(lambda r: not r.name.startswith(_HTTP_LOGGER))
        root.addHandler(app_file)
        logging.getLogger(_HTTP_LOGGER).addHandler(_rotating(LOG_HTTP_FILE))

    root.setLevel(getattr(logging, LEVEL, logging.INFO))

    # 合流 uvicorn 日志
    for ln in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(ln)
        lg.handlers = []
        lg.propagate = True

    _configured = True

_app_logger = logging.getLogger(_APP_LOGGER)
_http_logger = logging.getLogger(_HTTP_LOGGER)

def now_iso():
    # 本地时区 + 毫秒，示例：2025-09-18T17:30:42.123+09:00
    return datetime.now().astimezone().isoformat(timespec="milliseconds")


def _dumps(rec: dict) -> str:
    try:
        return json.dumps(rec, ensure_ascii=False, default=str)
    except Exception:
        return str(rec)


def emit(event: str, level: str = "INFO", **kwargs):
    """
    结构化日志：默认 INFO；每条都带时间戳 ts（本地时区）。
    用法：emit("gadget_create", request_id=..., gadget_id=..., status="Available")
    """
    rec = {"ts": now_iso(), "level": level, "event": event, **kwargs}
    _app_logger.info(_dumps(rec))


def emit_error(event: str, **kwargs):
    """
    错误日志（level=ERROR），同样带 ts。
    用法：emit_error("unhandled_error", request_id=..., error=repr(e))
    """
    rec = {"ts": now_iso(), "level": "ERROR", "event": event, **kwargs}
    _app_logger.error(_dumps(rec))


def redact(value):
    """递归把 password / token 等字段替换成 ***；其他结构原样返回。"""
    if isinstance(value, dict):
        return {
            k: (REDACTED if str(k).lower() in SENSITIVE_KEYS else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def decode_body(raw: bytes):
    """请求体 bytes → 可记录的值：JSON 解析后打码；非 JSON 截断成文本。"""
    if not raw:
        return None
    try:
        return redact(json.loads(raw))
    except ValueError:
        text = raw[:LOG_BODY_MAX].decode("utf-8", errors="replace")
        return text + ("...(truncated)" if len(raw) > LOG_BODY_MAX else "")


def log_request(request_id: str, method: str, path: str, query: str = "", body=None, headers=None):
    rec = {
        "type": "REQUEST",
        "ts": now_iso(),
        "requestID": request_id,
        "method": method,
        "url": f"{path}?{query}" if query else path,
        "body": body,
        "headers": redact(dict(headers or {})),
    }
    _http_logger.info(_dumps(rec))


def log_response(request_id: str, status_code: int, body=None):
    rec = {
        "type": "RESPONSE",
        "ts": now_iso(),
        "requestID": request_id,
        "statusCode": status_code,
        "body": redact(body),
    }
    _http_logger.info(_dumps(rec))
