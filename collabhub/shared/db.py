from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from collabhub.shared.config import settings

# Local SQLite DB under ./storage/ (created if missing)
ROOT = Path(__file__).resolve().parents[2]   # project root
STORAGE_DIR = ROOT / "storage"


def _db_url() -> str:
    if settings.DB_URL:
        return settings.DB_URL
    STORAGE_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(STORAGE_DIR / 'collabhub.db').as_posix()}"


DB_URL = _db_url()

if DB_URL.startswith("sqlite"):
    # in-memory sqlite must share one connection across threads
    _pool = {"poolclass": StaticPool} if DB_URL in ("sqlite://", "sqlite:///:memory:") else {}
    engine = create_engine(DB_URL, connect_args={"check_same_thread": False}, **_pool)

    @event.listens_for(engine, "connect")
    def _sqlite_fk_on(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()
else:
    engine = create_engine(DB_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

class Base(DeclarativeBase):
    pass

# FastAPI dep
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
