# gadget_api/core/state_machine.py
""""模块职能：

定义 Gadget 的状态与受保护的迁移（decommission / destroy），
保证“重复退役 / 重复销毁”被明确拒绝，而不是静默成功

主要函数/枚举：

GadgetStatus：状态枚举（规范大小写）

normalize_status(raw)：大小写不敏感输入 → 规范状态；非法则抛 InvalidStatus

can_transit(src, dst)：判断受保护入口是否允许该迁移

注意：管理型 update_gadget / rename / update_status 不经过这里的校验"""

from enum import Enum

from gadget_api.core.errors import InvalidStatus


class GadgetStatus(str, Enum):
    Available = "Available"
    Deployed = "Deployed"
    Destroyed = "Destroyed"
    Decommissioned = "Decommissioned"


# 只有两个受保护的目标状态；任意来源都可以进入，除了“自己到自己”
VALID = {
    "Available": {"Decommissioned", "Destroyed"},
    "Deployed": {"Decommissioned", "Destroyed"},
    "Destroyed": {"Decommissioned"},
    "Decommissioned": {"Destroyed"},
}


def can_transit(src: GadgetStatus, dst: GadgetStatus) -> bool:
    return GadgetStatus(dst).value in VALID[GadgetStatus(src).value]


def normalize_status(raw) -> GadgetStatus:
    """
    "deployed" / "DEPLOYED" / "Deployed" → GadgetStatus.Deployed
    首字母大写、其余小写后再匹配；空串或未知值 → InvalidStatus
    """
    if isinstance(raw, GadgetStatus):
        return raw
    text = (raw or "").strip()
    canonical = text[:1].upper() + text[1:].lower()
    try:
        return GadgetStatus(canonical)
    except ValueError:
        raise InvalidStatus(status=text)
