from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Base class for models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create database engine"""
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the engine"""
    return sessionmaker(autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker):
    """
    Open a session for the duration of one scrape operation

    The session is closed on exit whether or not the operation succeeded.
    Commits are the caller's responsibility.
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine):
    """Initialize database - create all tables that do not exist yet"""
    # Register models on Base.metadata
    from weather_monitor.data_layer.storage import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
