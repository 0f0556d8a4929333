""""
模块职能：

定义 gadgets 表：id（UUID 字符串）/ name / status

主要类型：

Base：全部 ORM 实体共用的 declarative Base（users 表见 models_user.py）

Gadget：status 只能是四个 GadgetStatus 之一，非空

注意：不提供删除方法，decommission / destroy 都只是改 status"""

# gadget_api/core/models.py
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from gadget_api.core.state_machine import GadgetStatus


def _uuid() -> str: return str(uuid.uuid4())

Base = declarative_base()

class Gadget(Base):
    __tablename__ = "gadgets"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    # native_enum=False → 按 VARCHAR 存储，SQLite/Postgres 行为一致
    status = Column(
        SAEnum(GadgetStatus, name="gadget_status", native_enum=False, length=20),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())
