""""模块职能：

gadgets / users 两张表的存储入口（默认 SQLite，DATABASE_URL 可切到任意 SQLAlchemy URL）

主要函数：

make_engine(url)：按 URL 建引擎；SQLite 关闭同线程检查（TestClient / uvicorn 线程池），
内存库用 StaticPool 让所有连接看到同一份数据

init_db(bind)：按 Base.metadata 建表（只建缺失的表，可重复执行）

get_db()：FastAPI 依赖，每请求一个 Session，用后关闭"""

import os
from typing import Generator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from gadget_api.core.models import Base
from gadget_api.core import models_user  # noqa: F401  # 导入以注册 users 表


def make_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gadgets.db")

engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(bind: Optional[Engine] = None):
    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
