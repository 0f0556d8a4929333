""""根据 .env 或默认值创建 demo 用户（口令哈希），并在 gadgets 表为空时写入几条示例数据。

可作为脚本执行，也可被测试直接导入调用（提供 run() 函数）"""
# scripts/seed.py
import os
import sys

# 确保脚本在控制台有输出；不影响主服务的日志设置
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("PYTHONUNBUFFERED", "1")

from sqlalchemy.orm import Session  # noqa: E402
from gadget_api.infra.db import SessionLocal  # noqa: E402
from gadget_api.infra.logger import emit  # noqa: E402
from gadget_api.core.models import Gadget  # noqa: E402
from gadget_api.core.models_user import User  # noqa: E402
from gadget_api.core.security import hash_password  # noqa: E402
from gadget_api.core.state_machine import GadgetStatus  # noqa: E402

SAMPLE_GADGETS = [
    ("Grappling Hook", GadgetStatus.Available),
    ("Exploding Pen", GadgetStatus.Deployed),
    ("Laser Watch", GadgetStatus.Available),
]


def _get_env(k: str, default: str) -> str:
    v = os.getenv(k)
    return v if v is not None and v != "" else default


def upsert_user(db: Session, username: str, password: str):
    u = db.query(User).filter(User.username == username).first()
    if u:
        action = "updated"
        if password:
            u.password_hash = hash_password(password)
    else:
        action = "created"
        u = User(username=username, password_hash=hash_password(password))
        db.add(u)

    emit("seed_user_upsert", username=username, action=action)
    print(f"[seed] {action} user: {username}", flush=True)


def seed_gadgets(db: Session) -> int:
    if db.query(Gadget).first():
        return 0
    for name, status in SAMPLE_GADGETS:
        db.add(Gadget(name=name, status=status))
    emit("seed_gadgets", count=len(SAMPLE_GADGETS))
    print(f"[seed] inserted {len(SAMPLE_GADGETS)} gadgets", flush=True)
    return len(SAMPLE_GADGETS)


def run():
    emit("seed_begin", database_url=os.getenv("DATABASE_URL"))
    print("[seed] seeding ...", flush=True)

    demo_username = _get_env("DEMO_USERNAME", "demo")
    demo_password = _get_env("DEMO_PASSWORD", "demo")

    with SessionLocal() as db:
        upsert_user(db, demo_username, demo_password)
        seed_gadgets(db)
        db.commit()

    emit("seed_done", status="ok")
    print("[seed] done.", flush=True)


if __name__ == "__main__":
    try:
        run()
        sys.exit(0)
    except Exception as e:
        emit("seed_error", error=str(e))
        print(f"[seed] ERROR: {e}", file=sys.stderr, flush=True)
        sys.exit(1)
