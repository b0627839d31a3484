import sqlite3
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings


def _connect_args(dsn: str) -> dict[str, Any]:
    if dsn.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.APP_DATABASE_DSN,
    connect_args=_connect_args(settings.APP_DATABASE_DSN),
    echo=settings.DEBUG,
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on FK enforcement so coupon deletes cascade to rules and applications."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the coupon tables if they do not exist yet."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
