"""
bizscout.db

Database connectivity for the relational store.

Contracts:
- make_engine(url) -> SQLAlchemy Engine (URL normalized first)
- make_session_factory(engine) -> sessionmaker
- session_scope(factory) context manager (commit / rollback / close)

There is no module-level engine: the process entry point (a flow or
script) builds one, injects it, and disposes it on exit.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def normalize_database_url(raw: str) -> str:
    """
    Normalize DATABASE_URL variants to something SQLAlchemy can reliably use.

    We prefer psycopg2 (psycopg2-binary is the declared driver).

    Normalizations:
    - postgres://  -> postgresql://
    - postgresql+psycopg:// -> postgresql+psycopg2://
    """
    url = (raw or "").strip()

    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]

    if url.startswith("postgresql+psycopg://"):
        url = "postgresql+psycopg2://" + url[len("postgresql+psycopg://") :]

    return url


def make_engine(url: str, **kwargs) -> Engine:
    normalized = normalize_database_url(url)
    if not normalized:
        raise RuntimeError("Database URL is empty.")
    if normalized.startswith("postgresql"):
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(normalized, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False: records loaded by the store stay readable after
    # their session closes (the sync engine builds documents from them).
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """
    Context-managed DB session.

    Usage:
        with session_scope(factory) as s:
            ...
    """
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
