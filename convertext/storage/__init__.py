"""
ConverText Storage - Persistence for routines, templates and conversion history

Backends:
- MemoryStorage (development/testing)
- PostgreSQLStorage (production, asyncpg)
"""

from .base import ConversionRecord, PersistenceResult, RoutineStorage
from .memory import MemoryStorage
from .postgres_storage import PostgreSQLStorage

__all__ = [
    "ConversionRecord",
    "PersistenceResult",
    "RoutineStorage",
    "MemoryStorage",
    "PostgreSQLStorage",
]
