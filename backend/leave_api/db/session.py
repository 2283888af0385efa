from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from leave_api.core.config import settings


def configure_sqlite(engine: Engine, immediate_transactions: bool = True) -> None:
    """Enforce foreign keys on every SQLite connection.

    With ``immediate_transactions`` each transaction opens with ``BEGIN IMMEDIATE``,
    taking the database write lock before the first read. The pysqlite driver
    otherwise defers BEGIN until the first write, leaving check-then-insert
    sequences unserialized.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        if immediate_transactions:
            # hand transaction control to the "begin" listener below
            dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    if immediate_transactions:

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")


is_sqlite = settings.database_url.startswith("sqlite")
connect_args = {"check_same_thread": False} if is_sqlite else {}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)
if is_sqlite:
    configure_sqlite(engine)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_session() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
