import logging
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import get_settings

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _create_engine() -> Engine:
    settings = get_settings()
    connect_args: dict[str, object] = {}
    if _is_sqlite(settings.database_url):
        connect_args["check_same_thread"] = False

    eng = create_engine(settings.database_url, connect_args=connect_args)
    if _is_sqlite(settings.database_url):
        event.listen(eng, "connect", _enable_sqlite_wal)
    return eng


def _enable_sqlite_wal(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.close()


engine = _create_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def create_schema(bind: Engine = engine) -> None:
    """Create missing tables directly, for local runs without an alembic step."""
    import models  # noqa: F401  registers mappers on Base.metadata

    Base.metadata.create_all(bind)
    logger.info(f"schema_ready: url={bind.url.render_as_string(hide_password=True)}")


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
