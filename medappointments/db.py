from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from medappointments.config import DATABASE_URL, DB_ECHO


def make_engine(url: str = DATABASE_URL, echo: bool = DB_ECHO) -> Engine:
    """
    Crea un engine SQLAlchemy.
    Per SQLite in memoria usa StaticPool: una sola connessione condivisa,
    altrimenti ogni sessione vedrebbe un DB vuoto.
    """
    if url == "sqlite://" or (url.startswith("sqlite") and ":memory:" in url):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo, pool_pre_ping=True)


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


engine = make_engine()
SessionLocal = make_session_factory(engine)


class Base(DeclarativeBase):
    """Base ORM per tutti i modelli."""
    pass


@contextmanager
def db_session(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """
    Context manager per gestire correttamente la sessione:
    - commit se tutto ok
    - rollback su eccezioni
    - close sempre
    """
    session: Session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Engine | None = None) -> None:
    """Crea le tabelle se non esistono."""
    # registra i modelli nel metadata
    from medappointments import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
