# survey_intel/db/session.py
from typing import Generator
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from survey_intel.core.config import settings

DB_URL = settings.DATABASE_URL  # e.g., "sqlite:///./survey_intel.db"

# SQLite-friendly connect args
is_sqlite = DB_URL.startswith("sqlite")
is_memory = is_sqlite and ":memory:" in DB_URL
connect_args = {"check_same_thread": False, "timeout": 30} if is_sqlite else {}

engine_kwargs: dict = {"future": True, "pool_pre_ping": True, "connect_args": connect_args}
if is_memory:
    # One shared connection, otherwise every session sees an empty database
    engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DB_URL, **engine_kwargs)

# Enable WAL + sane pragmas for SQLite
if is_sqlite:
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cur = dbapi_connection.cursor()
        try:
            if not is_memory:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
            cur.execute("PRAGMA foreign_keys=ON;")
        finally:
            cur.close()

SessionLocal = sessionmaker(
    bind=engine,
    future=True,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a request-scoped Session.
    Every write in a request goes through this one session so multi-row
    writes commit (or roll back) together.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
