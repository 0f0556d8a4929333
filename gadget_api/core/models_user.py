# gadget_api/core/models_user.py
""""定义 User ORM 实体：id/username/password_hash/created_at。

username 全局唯一（唯一索引兜底并发注册）；只存 bcrypt 哈希，不存明文。"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String

from gadget_api.core.models import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
