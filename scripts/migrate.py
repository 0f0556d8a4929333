""""轻量迁移：创建 gadgets / users 表（若不存在），不修改既有表。

用 SQLAlchemy 的 Base.metadata.create_all()
只创建缺失的表，不会破坏现有数据。"""

# scripts/migrate.py
import os
import sys

# 确保脚本在控制台有输出；不影响主服务的日志设置
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("PYTHONUNBUFFERED", "1")

from gadget_api.infra.db import engine  # noqa: E402
from gadget_api.core.models import Base  # noqa: E402
from gadget_api.core import models_user  # noqa: F401, E402  # 导入以注册到 Base
from gadget_api.infra.logger import emit  # noqa: E402


def run():
    emit("migrate_begin", database_url=os.getenv("DATABASE_URL"))
    print("[migrate] creating tables if not exists ...", flush=True)
    Base.metadata.create_all(bind=engine)
    emit("migrate_done", status="ok", tables=sorted(Base.metadata.tables))
    print("[migrate] done.", flush=True)


if __name__ == "__main__":
    print(f"[migrate] DATABASE_URL={os.getenv('DATABASE_URL')}", flush=True)
    try:
        run()
        sys.exit(0)
    except Exception as e:
        emit("migrate_error", error=str(e))
        print(f"[migrate] ERROR: {e}", file=sys.stderr, flush=True)
        sys.exit(1)
