"""
db.engine - Engine bootstrap and session factories.

Two stores are wired up: the PAT record store and the Inventory
registry.  Either connection string can be swapped to Postgres by
changing config; no other code needs to change.
"""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.models import Base, InventoryBase

_SessionLocal: sessionmaker | None = None
_InventorySessionLocal: sessionmaker | None = None


def _make_engine(db_url: str) -> Engine:
    engine = create_engine(db_url, echo=False, future=True)

    if "sqlite" in db_url:
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _rec):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA foreign_keys=ON")
            cur.execute("PRAGMA synchronous=NORMAL")
            cur.close()

    return engine


def init_db(db_url: str, inventory_url: str) -> None:
    """Create both engines, apply SQLite pragmas, and emit CREATE TABLE."""
    global _SessionLocal, _InventorySessionLocal

    engine = _make_engine(db_url)
    Base.metadata.create_all(engine)
    _SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)

    inventory_engine = _make_engine(inventory_url)
    InventoryBase.metadata.create_all(inventory_engine)
    _InventorySessionLocal = sessionmaker(bind=inventory_engine, expire_on_commit=False)


def get_session() -> Session:
    """Return a new PAT-store session.  Caller is responsible for .close()."""
    if _SessionLocal is None:
        raise RuntimeError("Database not initialised - call init_db() first")
    return _SessionLocal()


def get_inventory_session() -> Session:
    """Return a new Inventory session.  Caller is responsible for .close()."""
    if _InventorySessionLocal is None:
        raise RuntimeError("Database not initialised - call init_db() first")
    return _InventorySessionLocal()
