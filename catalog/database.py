from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, pool, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
import os
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./catalog.db")


def _engine_options(url: str) -> dict:
    """Pool settings for server databases, thread sharing for SQLite"""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    # QueuePool maintains a pool of connections that can be reused
    return {
        "poolclass": pool.QueuePool,
        "pool_size": int(os.getenv("DB_POOL_SIZE", 5)),  # Number of connections to keep open
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", 10)),  # Max connections beyond pool_size
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", 30)),  # Seconds to wait for connection
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", 3600)),  # Recycle connections after 1 hour
        "pool_pre_ping": True,  # Test connections before using them
    }


engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("DB_ECHO", "false").lower() == "true",  # Set to true for SQL debugging
    **_engine_options(DATABASE_URL)
)

@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """Log when a new connection is created"""
    logger.debug("Database connection established")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class Database:
    """
    Per-operation access to the backing store.

    Every store call acquires its own session and releases it on every exit
    path, so a session is never shared between concurrent operations.

    Usage:
        with database.session() as session:
            session.scalar(...)

        with database.transaction() as session:
            session.execute(...)  # committed only if the block completes
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Read scope: the session is closed (and its implicit transaction discarded) on exit"""
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Write scope: commit after the block completes, rollback on any
        exception, including cancellation surfacing as BaseException.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except BaseException as e:
            logger.warning(f"Rolling back transaction: {type(e).__name__}")
            session.rollback()
            raise
        finally:
            session.close()


# Dependency for FastAPI routes
def get_database() -> Database:
    """
    Database dependency for FastAPI.

    Usage:
        @router.get("/endpoint")
        def endpoint(db: Database = Depends(get_database)):
            # Pass db to the stores/services
    """
    return Database(SessionLocal)


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet"""
    # Import models so they are registered on Base.metadata
    import catalog.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
