from contextlib import contextmanager
from typing import Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .schema import Base

_ENGINES: Dict[str, Engine] = {}


def get_engine(sqlite_path: str) -> Engine:
    """Engine for a row store file, created (with its tables) once per path."""
    engine = _ENGINES.get(sqlite_path)
    if engine is None:
        if sqlite_path == ":memory:":
            engine = create_engine("sqlite://", future=True, poolclass=StaticPool)
        else:
            engine = create_engine(f"sqlite:///{sqlite_path}", future=True)
        Base.metadata.create_all(engine)
        _ENGINES[sqlite_path] = engine
    return engine


def get_session(sqlite_path: str) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    return sessionmaker(bind=get_engine(sqlite_path), autoflush=False, autocommit=False)()


@contextmanager
def session_context(sqlite_path: str) -> Generator[Session, None, None]:
    """
    Context manager for row store sessions.
    
    Rolls back on error and always closes the session. Repository functions
    commit their own writes.
    """
    session = get_session(sqlite_path)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
