# catalog/database.py
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

logger = logging.getLogger("catalog-api.db")

# -----------------------------
# Helpers
# -----------------------------
def _env_bool(key: str, default: bool = False) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}

# Logs SQL la nevoie: DB_ECHO=1 / true / yes / on
ECHO_SQL = _env_bool("DB_ECHO", False)

# -----------------------------
# Naming convention
# -----------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)
Base = declarative_base(metadata=metadata)

# -----------------------------
# Engine factory
# -----------------------------
def _sqlite_url(path: Union[str, Path]) -> str:
    return f"sqlite:///{Path(path)}"


def _set_sqlite_pragmas(dbapi_conn, _record) -> None:
    # commit-ul trebuie să fie durabil înainte să răspundem clientului
    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA synchronous=FULL")
    finally:
        cur.close()


def build_engine(path: Union[str, Path], *, echo: bool | None = None) -> Engine:
    """
    Engine SQLite pentru o colecție.
    - check_same_thread=False: handler-ele rulează în threadpool-ul FastAPI.
    - NullPool: pentru fișiere, pooling-ul are beneficii reduse la SQLite.
    """
    engine = create_engine(
        _sqlite_url(path),
        echo=ECHO_SQL if echo is None else echo,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def init_schema(engine: Engine) -> None:
    """Creează tabelele din modele dacă lipsesc (idempotent)."""
    from catalog.models import record  # noqa: F401
    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """
    Context manager tranzacțional:
        with session_scope(engine) as db:
            db.add(obj)
    Commit la ieșire, rollback automat la excepție.
    """
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    db: Session = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = [
    "Base",
    "build_engine",
    "init_schema",
    "session_scope",
]
