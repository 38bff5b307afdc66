"""Database package for MongoDB operations using Beanie ODM.

Modules:
    manager: DatabaseManager singleton for connection handling
    models: Beanie Document models

Usage:
    from db import db_manager
    from db.models import UsageRecord

    await db_manager.init_beanie()
    records = await UsageRecord.find_all().to_list()
"""

from db.manager import DatabaseManager, db_manager
from db.models import ALL_DOCUMENT_MODELS, UsageRecord

__all__ = [
    "ALL_DOCUMENT_MODELS",
    "DatabaseManager",
    "UsageRecord",
    "db_manager",
]
