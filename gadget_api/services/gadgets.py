"""
模块职能：
- Gadget 生命周期：查询 / 按状态过滤 / 创建 / 改名 / 管理型改状态 / 退役 / 销毁。
- 所有对 status 的修改都经过这里；decommission / destroy 走状态机守卫，
  重复操作抛 AlreadyDecommissioned / AlreadyDestroyed，而不是静默成功。
- 每次守卫写入前都重新读库（先查后写，无行锁；并发重复销毁最终状态一致）。
- 永不物理删除：退役 / 销毁只改 status，记录仍可查询。

参数约定：db（Session）+ rctx（RequestContext，用于日志里的 request_id）

日志：
- gadget_create / gadget_update（改名、改状态都记这一条）
- gadget_decommission / gadget_destroy / gadget_guard_rejected / gadget_not_found
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from gadget_api.core.context import RequestContext
from gadget_api.core.errors import AlreadyDecommissioned, AlreadyDestroyed, InvalidInput, NotFound
from gadget_api.core.models import Gadget
from gadget_api.core.state_machine import GadgetStatus, can_transit, normalize_status
from gadget_api.core.validation import is_valid_uuid, parse_gadget_id, require_text
from gadget_api.infra.logger import emit

# 受保护目标状态 → 重复迁移时抛出的错误
_GUARD_ERRORS = {
    GadgetStatus.Decommissioned: AlreadyDecommissioned,
    GadgetStatus.Destroyed: AlreadyDestroyed,
}


def _load(db: Session, rctx: RequestContext, gadget_id: str) -> Gadget:
    # 非法 UUID 不可能命中任何记录，按 NotFound 处理
    g = db.get(Gadget, parse_gadget_id(gadget_id)) if is_valid_uuid(gadget_id) else None
    if not g:
        emit("gadget_not_found", request_id=rctx.request_id, gadget_id=str(gadget_id))
        raise NotFound(gadget_id=str(gadget_id))
    return g


def get_gadget(db: Session, rctx: RequestContext, gadget_id: str) -> Gadget:
    return _load(db, rctx, gadget_id)


def list_gadgets(db: Session, rctx: RequestContext) -> List[Gadget]:
    rows = db.query(Gadget).all()
    emit("gadget_list", request_id=rctx.request_id, status="*", count=len(rows))
    return rows


def list_by_status(db: Session, rctx: RequestContext, status: str) -> List[Gadget]:
    st = normalize_status(status)
    rows = db.query(Gadget).filter(Gadget.status == st).all()
    emit("gadget_list", request_id=rctx.request_id, status=st.value, count=len(rows))
    return rows


def create_gadget(db: Session, rctx: RequestContext, name: str, status: str) -> Gadget:
    """创建时不做前置状态校验：任意合法状态都可以作为初始状态。"""
    name = require_text(name, "name")
    st = normalize_status(status)
    g = Gadget(name=name, status=st)
    db.add(g); db.commit(); db.refresh(g)
    emit("gadget_create", request_id=rctx.request_id, gadget_id=g.id, status=st.value)
    return g


def update_gadget(
    db: Session,
    rctx: RequestContext,
    gadget_id: str,
    name: Optional[str] = None,
    status: Optional[str] = None,
) -> Gadget:
    """
    PATCH 用：先校验全部字段，再读一次、改一次、提交一次。
    任一字段非法时不产生任何写入（不会出现“名字改了、状态报错”的半写）。
    """
    if name is None and status is None:
        raise InvalidInput("Body is missing status and name parameter.")
    if name is not None:
        name = require_text(name, "name")
    st = normalize_status(status) if status is not None else None

    g = _load(db, rctx, gadget_id)
    src = GadgetStatus(g.status)
    if name is not None:
        g.name = name
    if st is not None:
        g.status = st
    db.add(g); db.commit(); db.refresh(g)
    emit(
        "gadget_update", request_id=rctx.request_id, gadget_id=g.id,
        renamed=name is not None, src=src.value, dst=GadgetStatus(g.status).value,
    )
    return g


def rename_gadget(db: Session, rctx: RequestContext, gadget_id: str, name: str) -> Gadget:
    return update_gadget(db, rctx, gadget_id, name=name)


def update_status(db: Session, rctx: RequestContext, gadget_id: str, status: str) -> Gadget:
    # 管理型路径：任意状态 → 任意状态，不走状态机
    return update_gadget(db, rctx, gadget_id, status=status)


def _guarded_transition(db: Session, rctx: RequestContext, gadget_id: str, dst: GadgetStatus, event: str) -> Gadget:
    gid = parse_gadget_id(gadget_id)
    g = _load(db, rctx, gid)
    src = GadgetStatus(g.status)
    if not can_transit(src, dst):
        emit("gadget_guard_rejected", request_id=rctx.request_id, gadget_id=gid, src=src.value, dst=dst.value)
        raise _GUARD_ERRORS[dst](gadget_id=gid)
    g.status = dst
    db.add(g); db.commit(); db.refresh(g)
    emit(event, request_id=rctx.request_id, gadget_id=gid, src=src.value)
    return g


def decommission_gadget(db: Session, rctx: RequestContext, gadget_id: str) -> Gadget:
    """软删除：status → Decommissioned；已退役则抛 AlreadyDecommissioned。"""
    return _guarded_transition(db, rctx, gadget_id, GadgetStatus.Decommissioned, "gadget_decommission")


def destroy_gadget(db: Session, rctx: RequestContext, gadget_id: str) -> Gadget:
    """自毁：status → Destroyed；已销毁则抛 AlreadyDestroyed。记录保留。"""
    return _guarded_transition(db, rctx, gadget_id, GadgetStatus.Destroyed, "gadget_destroy")
