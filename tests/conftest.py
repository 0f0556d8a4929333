""""测试公共配置：

环境变量必须在导入 gadget_api 之前设置（engine / bcrypt 轮数 / 日志开关都在导入时读取）；

HTTP 测试共用一个临时 SQLite 文件；服务层测试每个用例一份独立的内存库。"""
# tests/conftest.py
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="gadget_api_pytest_")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/pytest_gadgets.db"
os.environ["LOG_TO_FILE"] = "false"   # 测试别落盘，减少噪音
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SECRET_KEY"] = "pytest-signing-key-0123456789abcdef0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from gadget_api.infra.db import init_db, make_engine  # noqa: E402
from gadget_api.core.context import RequestContext  # noqa: E402

TEST_SECRET = os.environ["SECRET_KEY"]


@pytest.fixture()
def db():
    # 内存库：make_engine 会用 StaticPool，所有连接复用同一份数据
    engine = make_engine("sqlite://")
    init_db(engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with Session() as session:
        yield session
    engine.dispose()


@pytest.fixture()
def rctx():
    return RequestContext.new("pytest-request")


@pytest.fixture()
def secret():
    return TEST_SECRET
