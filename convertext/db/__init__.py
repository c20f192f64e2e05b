"""ConverText Database - asyncpg pool used by PostgreSQLStorage."""

from .database import Database

__all__ = ["Database"]
