"""
db - Database layer.

Public API:
    init_db()                → create engines + tables
    get_session()            → new PAT-store Session
    get_inventory_session()  → new Inventory Session
    PATRecord, Asset, PATTest → ORM models
"""

from db.engine import init_db, get_session, get_inventory_session     # noqa: F401
from db.models import (                                                # noqa: F401
    Base, InventoryBase, PATRecord, Asset, PATTest,
)
