"""Database engine, session factory and schema bootstrap"""

from typing import Any, Dict, Iterator
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from debt_ledger.config import settings
from debt_ledger.infrastructure.database.models import Base


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings per backend; SQLite connections are shared across request threads"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    # Pool of 10 + 10 overflow, recycled hourly to avoid stale connections
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }


def enable_sqlite_savepoints(bind: Engine) -> None:
    """Have SQLAlchemy emit BEGIN itself so pysqlite savepoints nest correctly"""

    @event.listens_for(bind, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(bind, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str) -> Engine:
    bind = create_engine(database_url, **engine_options(database_url))
    if database_url.startswith("sqlite"):
        enable_sqlite_savepoints(bind)
    return bind


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create the debt and ledger_transaction tables if missing"""
    Base.metadata.create_all(bind=bind)


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
