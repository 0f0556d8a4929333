# gadget_api/core/validation.py
"""共享校验：gadget id（UUID）与非空文本。"""
import uuid

from gadget_api.core.errors import InvalidIdentifier, InvalidInput


def is_valid_uuid(raw) -> bool:
    try:
        uuid.UUID(str(raw))
        return True
    except ValueError:
        return False


def parse_gadget_id(raw) -> str:
    # 统一成小写带连字符的标准形式，与入库格式一致
    try:
        return str(uuid.UUID(str(raw)))
    except ValueError:
        raise InvalidIdentifier(gadget_id=str(raw))


def require_text(value, field: str, max_length: int = 255) -> str:
    """空白串视为缺失；原样返回（不做 strip），名称属于自由文本。"""
    if value is None or not str(value).strip():
        raise InvalidInput(f"{field} must not be empty", field=field)
    if len(value) > max_length:
        raise InvalidInput(f"{field} must be at most {max_length} characters", field=field)
    return value
