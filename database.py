import logging
from contextlib import contextmanager

from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    # in-memory databases live as long as their single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# get a session
def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def unit_of_work(session: Session):
    """Group several writes into one commit.

    Everything added or deleted inside the block is committed together when
    the block exits normally. Any exception rolls the whole group back and is
    re-raised, so a parent row never lands without its children (or the
    other way round).
    """
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("unit of work rolled back")
        session.rollback()
        raise
