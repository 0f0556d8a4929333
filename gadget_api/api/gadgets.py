# gadget_api/api/gadgets.py
# -*- coding: utf-8 -*-
"""
Gadget API（全部需要 Bearer 令牌）
------------------------------------------------
职能：
- GET    /gadgets                     列表；带 ?status= 时按状态过滤（大小写不敏感）
- GET    /gadgets/{id}                单个查询
- POST   /gadgets                     创建（任意合法初始状态）
- PATCH  /gadgets/{id}                改名 / 管理型改状态（两者一起校验、一次提交）
- DELETE /gadgets/{id}                退役（软删除，status → Decommissioned）
- POST   /gadgets/{id}/self-destruct  销毁（status → Destroyed，记录保留）

引用库：
- FastAPI: 路由与依赖注入
- Pydantic: 严格入参模型（extra="forbid"），脏字段在进入服务层之前就被拒绝
- 自有模块:
    - gadget_api.services.gadgets: 生命周期与状态机守卫
    - gadget_api.api.envelope.respond: 统一响应信封

错误（NotFound / InvalidStatus / AlreadyDecommissioned ...）由服务层抛出，
main.py 的全局处理器渲染为对应 HTTP 状态码。
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, model_validator
from sqlalchemy.orm import Session

from gadget_api.api.deps.auth import get_identity
from gadget_api.api.envelope import respond
from gadget_api.core.context import Identity, RequestContext, get_request_context
from gadget_api.core.state_machine import GadgetStatus
from gadget_api.infra.db import get_db
from gadget_api.services import gadgets as gadget_svc

router = APIRouter(tags=["gadgets"])


class GadgetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: GadgetStatus


class GadgetCreateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    status: str = Field(min_length=1, max_length=20)


class GadgetUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[str] = Field(default=None, min_length=1, max_length=20)

    @model_validator(mode="after")
    def _need_one(self):
        if self.name is None and self.status is None:
            raise ValueError("Body is missing status and name parameter.")
        return self


def _out(g) -> dict:
    return GadgetOut.model_validate(g).model_dump(mode="json")


def _out_list(rows) -> List[dict]:
    return [_out(g) for g in rows]


@router.get("/gadgets")
def list_gadgets(
    status: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    # ?status= 空值与不传一致，返回全量
    if status:
        rows = gadget_svc.list_by_status(db, rctx, status)
    else:
        rows = gadget_svc.list_gadgets(db, rctx)
    return respond(rctx, data=_out_list(rows))


@router.get("/gadgets/{gadget_id}")
def get_gadget(
    gadget_id: str,
    db: Session = Depends(get_db),
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    g = gadget_svc.get_gadget(db, rctx, gadget_id)
    return respond(rctx, data=_out(g))


@router.post("/gadgets", status_code=201)
def create_gadget(
    body: GadgetCreateIn,
    db: Session = Depends(get_db),
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    g = gadget_svc.create_gadget(db, rctx, body.name, body.status)
    return respond(rctx, data=_out(g), message="Gadget is created successfully", status_code=201)


@router.patch("/gadgets/{gadget_id}")
def update_gadget(
    gadget_id: str,
    body: GadgetUpdateIn,
    db: Session = Depends(get_db),
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    g = gadget_svc.update_gadget(db, rctx, gadget_id, name=body.name, status=body.status)
    return respond(rctx, data=_out(g), message="Gadget was updated successfully.")


@router.delete("/gadgets/{gadget_id}")
def decommission_gadget(
    gadget_id: str,
    db: Session = Depends(get_db),
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    g = gadget_svc.decommission_gadget(db, rctx, gadget_id)
    return respond(rctx, data=_out(g), message="Gadget is decommissioned successfully.")


@router.post("/gadgets/{gadget_id}/self-destruct")
def self_destruct(
    gadget_id: str,
    db: Session = Depends(get_db),
    ident: Identity = Depends(get_identity),
    rctx: RequestContext = Depends(get_request_context),
):
    g = gadget_svc.destroy_gadget(db, rctx, gadget_id)
    return respond(rctx, data=_out(g), message="Gadget is destroyed successfully.")
