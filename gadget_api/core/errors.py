# gadget_api/core/errors.py
"""
核心错误分类（生命周期 + 认证）。

- 每个错误带 kind（内部区分，用于打点）、status_code（网关映射 HTTP 状态）、message（对外文案）
- UnknownUser 与 InvalidCredentials 对外文案完全相同，避免用户名枚举；只在日志里区分
- 服务层直接 raise；main.py 注册的 exception handler 统一渲染为响应信封
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, **fields: Any):
        self.message = message or self.default_message
        self.fields: Dict[str, Any] = fields
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidInput(AppError):
    default_message = "Invalid input"


# ---- 生命周期 ----

class LifecycleError(AppError):
    pass


class NotFound(LifecycleError):
    status_code = 404
    default_message = "No gadget with this UUID was found"


class InvalidIdentifier(LifecycleError):
    default_message = "Wrong UUID was provided"


class InvalidStatus(LifecycleError):
    default_message = "Given status does not exist"


class AlreadyDecommissioned(LifecycleError):
    default_message = "Gadget was already Decommissioned"


class AlreadyDestroyed(LifecycleError):
    default_message = "Gadget was already Destroyed"


# ---- 认证 ----

class AuthError(AppError):
    status_code = 401


class DuplicateUsername(AuthError):
    status_code = 400
    default_message = "Username is already taken"


class UnknownUser(AuthError):
    default_message = "Invalid username or password"


class InvalidCredentials(AuthError):
    default_message = "Invalid username or password"


class MissingToken(AuthError):
    default_message = "Missing Authorization header"


class InvalidToken(AuthError):
    default_message = "Invalid or expired token"
