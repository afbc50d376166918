from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dailyquiz.core.config import Settings


def build_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    if not url.startswith("sqlite"):
        return create_engine(url, future=True, pool_pre_ping=True, echo=settings.DATABASE_ECHO)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # a single shared connection keeps the in-memory database alive
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, future=True, echo=settings.DATABASE_ECHO, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
