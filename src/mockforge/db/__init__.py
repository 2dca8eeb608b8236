from mockforge.db.engine import get_engine
from mockforge.db.memory import InMemoryRecordStore
from mockforge.db.postgres import PostgresRecordStore

__all__ = [
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "get_engine",
]
