"""
Module: divvy_kernel.db.engine
Responsibility: Own the planner store's SQLAlchemy engine and session
    factory, and provide a commit-or-rollback session scope.
Architecture position: Kernel > DB.  May import from db/base.py and models/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - At most one engine at a time; re-initialising disposes the old one.
    - session_scope() commits on success and rolls back on any exception.
    - In-memory SQLite URLs share a single connection (StaticPool) so every
      session sees the same database.

Failure modes:
    - RuntimeError from the accessors before init_engine_from_url().
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from divvy_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DEFAULT_DATABASE_URL = "sqlite:///divvyplan.db"

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALISED = "Planner store not initialised; call init_engine_from_url() first."


def _engine_options(database_url: str, echo: bool) -> dict:
    options: dict = {"echo": echo}
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    return options


def init_engine_from_url(database_url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:///divvyplan.db`` or
            ``sqlite://`` for an in-memory database.
        echo: Log every SQL statement.
    """
    global _engine, _SessionFactory

    reset_engine()
    _engine = create_engine(database_url, **_engine_options(database_url, echo))
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info("engine_initialized", extra={
        "dialect": _engine.dialect.name,
        "database": _engine.url.database,
    })
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALISED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALISED)
    return _SessionFactory


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Yield a session inside one transaction.

    The transaction commits when the block exits normally. Any exception
    rolls it back and is re-raised. The session is always closed.

    Usage:
        with session_scope() as session:
            session.add(record)
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create the planner tables if they do not exist."""
    from divvy_kernel.db.base import Base
    import divvy_kernel.models  # noqa: F401  (registers tables)

    Base.metadata.create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """Drop the planner tables. Tests only."""
    from divvy_kernel.db.base import Base
    import divvy_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None
