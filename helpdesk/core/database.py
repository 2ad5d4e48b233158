"""Database setup with SQLAlchemy."""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from helpdesk.core.config import DATABASE_URL


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def get_session_factory(request: Request) -> sessionmaker:
    return getattr(request.app.state, "session_factory", None) or SessionLocal


def get_db(request: Request):
    """Dependency for database session."""
    db = get_session_factory(request)()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    import helpdesk.models  # noqa: F401  models must be imported before create_all

    Base.metadata.create_all(bind=engine)
