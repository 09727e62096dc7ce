import logging
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from errors import StoreError

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_session_factory(database_url: str) -> sessionmaker:
    """
    Build the SQLAlchemy engine and session factory for the given URL.
    The factory is stored on ``app.state`` by the application factory.
    """
    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},  # needed for SQLite + FastAPI
    )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    FastAPI dependency that provides a database session and makes
    sure it is closed after the request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Commit everything done inside the block, or roll all of it back.

    Store failures are logged with the raw driver error and re-raised as
    StoreError so that clients only ever see a generic message.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error")
        raise StoreError()
    except Exception:
        db.rollback()
        raise


@contextmanager
def reading(db: Session):
    """Wrap read-only queries so driver errors surface as StoreError."""
    try:
        yield db
    except SQLAlchemyError:
        logger.exception("Database error")
        raise StoreError()
