"""
PostgreSQL routine storage backend.

Uses asyncpg via the shared Database pool. Each object is stored whole as
JSONB, with the columns needed for owner-scoped lookups and ordering kept
alongside.
"""

import json
import logging
from typing import List, Optional

from ..db.database import Database
from ..routine.models import ConversionRoutineExecution, RoutineTemplate, WorkflowStep
from ..errors import PersistenceError
from .base import ConversionRecord, RoutineStorage

logger = logging.getLogger(__name__)

SCHEMA_SQL = [
    """
    CREATE TABLE IF NOT EXISTS routine_executions (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        status TEXT NOT NULL,
        provider TEXT NOT NULL,
        saved_routine_id TEXT,
        data JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL,
        last_updated TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS routine_steps (
        id TEXT PRIMARY KEY,
        execution_id TEXT NOT NULL REFERENCES routine_executions(id) ON DELETE CASCADE,
        step_number INTEGER NOT NULL,
        status TEXT NOT NULL,
        data JSONB NOT NULL,
        timestamp TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS routine_templates (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        data JSONB NOT NULL,
        usage_count INTEGER NOT NULL DEFAULT 0,
        last_used TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversion_history (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        step_id TEXT,
        provider TEXT NOT NULL,
        data JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_routine_executions_owner ON routine_executions(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_routine_steps_execution ON routine_steps(execution_id, step_number)",
    "CREATE INDEX IF NOT EXISTS idx_routine_templates_owner ON routine_templates(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_conversion_history_owner ON conversion_history(owner_id, created_at)",
]

INSERT_STEP_SQL = """
    INSERT INTO routine_steps (id, execution_id, step_number, status, data, timestamp)
    VALUES ($1, $2, $3, $4, $5::jsonb, $6)
"""


class PostgreSQLStorage(RoutineStorage):
    """
    PostgreSQL storage for routines, templates and conversion history.

    Usage with shared Database pool:
        db = Database(dsn="postgresql://...")
        await db.initialize()
        storage = PostgreSQLStorage(db=db)
        await storage.initialize()

    Usage standalone:
        storage = PostgreSQLStorage(dsn="postgresql://...")
        await storage.initialize()
    """

    def __init__(
        self,
        db: Optional[Database] = None,
        dsn: Optional[str] = None,
    ):
        if db is None and dsn is None:
            raise ValueError("Either db or dsn must be provided")
        self._db = db
        self._dsn = dsn
        self._owns_db = db is None
        self._initialized = False

    async def initialize(self) -> None:
        """Create tables and indexes. Must be called before use."""
        if self._initialized:
            return

        if self._db is None:
            self._db = Database(dsn=self._dsn)
        await self._db.initialize()

        for sql in SCHEMA_SQL:
            await self._db.execute(sql)

        self._initialized = True
        logger.info("PostgreSQL routine storage initialized")

    async def close(self) -> None:
        if self._owns_db and self._db is not None:
            await self._db.close()

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "PostgreSQLStorage not initialized. Call await storage.initialize() first."
            )

    # -- Executions -----------------------------------------------------------

    async def create_execution(self, execution: ConversionRoutineExecution) -> None:
        """Insert the execution and its steps in one transaction."""
        self._ensure_initialized()
        async with self._db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO routine_executions
                    (id, owner_id, name, status, provider, saved_routine_id, data, created_at, last_updated)
                VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb, $8, $9)
                """,
                execution.id,
                execution.owner_id,
                execution.name,
                execution.status.value,
                execution.provider,
                execution.saved_routine_id,
                json.dumps(self._execution_data(execution)),
                execution.created_at,
                execution.last_updated,
            )
            for step in execution.steps:
                await conn.execute(INSERT_STEP_SQL, *self._step_args(execution.id, step))

    async def update_execution(self, execution: ConversionRoutineExecution) -> None:
        self._ensure_initialized()
        await self._db.execute(
            """
            UPDATE routine_executions
            SET name = $2, status = $3, data = $4::jsonb, last_updated = $5
            WHERE id = $1
            """,
            execution.id,
            execution.name,
            execution.status.value,
            json.dumps(self._execution_data(execution)),
            execution.last_updated,
        )

    async def create_step(self, execution_id: str, step: WorkflowStep) -> None:
        self._ensure_initialized()
        await self._db.execute(INSERT_STEP_SQL, *self._step_args(execution_id, step))

    async def update_step(self, execution_id: str, step: WorkflowStep) -> None:
        self._ensure_initialized()
        await self._db.execute(
            """
            UPDATE routine_steps SET status = $3, data = $4::jsonb
            WHERE id = $1 AND execution_id = $2
            """,
            step.id,
            execution_id,
            step.status.value,
            json.dumps(step.to_dict()),
        )

    async def get_execution(self, execution_id: str) -> Optional[ConversionRoutineExecution]:
        self._ensure_initialized()
        row = await self._db.fetchrow(
            "SELECT data FROM routine_executions WHERE id = $1",
            execution_id,
        )
        if row is None:
            return None
        data = self._load(row["data"])
        steps = await self._db.fetch(
            "SELECT data FROM routine_steps WHERE execution_id = $1 ORDER BY step_number",
            execution_id,
        )
        data["steps"] = [self._load(r["data"]) for r in steps]
        return ConversionRoutineExecution.from_dict(data)

    # -- Templates ------------------------------------------------------------

    async def list_templates(self, owner_id: str) -> List[RoutineTemplate]:
        self._ensure_initialized()
        rows = await self._db.fetch(
            """
            SELECT data, usage_count, last_used FROM routine_templates
            WHERE owner_id = $1
            ORDER BY created_at DESC
            """,
            owner_id,
        )
        return [self._parse_template(r) for r in rows]

    async def get_template(self, template_id: str, owner_id: str) -> Optional[RoutineTemplate]:
        self._ensure_initialized()
        row = await self._db.fetchrow(
            """
            SELECT data, usage_count, last_used FROM routine_templates
            WHERE id = $1 AND owner_id = $2
            """,
            template_id,
            owner_id,
        )
        return self._parse_template(row) if row else None

    async def save_template(self, template: RoutineTemplate) -> None:
        self._ensure_initialized()
        await self._db.execute(
            """
            INSERT INTO routine_templates (id, owner_id, name, data, usage_count, last_used, created_at)
            VALUES ($1, $2, $3, $4::jsonb, $5, $6, $7)
            ON CONFLICT (id) DO UPDATE SET
                name = EXCLUDED.name,
                data = EXCLUDED.data
            """,
            template.id,
            template.owner_id,
            template.name,
            json.dumps(template.to_dict()),
            template.usage_count,
            template.last_used,
            template.created_at,
        )

    async def delete_template(self, template_id: str, owner_id: str) -> bool:
        self._ensure_initialized()
        result = await self._db.execute(
            "DELETE FROM routine_templates WHERE id = $1 AND owner_id = $2",
            template_id,
            owner_id,
        )
        return self._parse_row_count(result) > 0

    async def increment_usage(self, template_id: str, owner_id: str) -> None:
        self._ensure_initialized()
        result = await self._db.execute(
            """
            UPDATE routine_templates
            SET usage_count = usage_count + 1, last_used = NOW()
            WHERE id = $1 AND owner_id = $2
            """,
            template_id,
            owner_id,
        )
        if self._parse_row_count(result) == 0:
            raise PersistenceError(f"Template '{template_id}' not stored")

    # -- History --------------------------------------------------------------

    async def save_conversion(self, record: ConversionRecord) -> None:
        self._ensure_initialized()
        await self._db.execute(
            """
            INSERT INTO conversion_history (id, owner_id, step_id, provider, data, created_at)
            VALUES ($1, $2, $3, $4, $5::jsonb, $6)
            """,
            record.id,
            record.owner_id,
            record.step_id,
            record.provider,
            json.dumps(record.to_dict()),
            record.created_at,
        )

    async def list_conversions(self, owner_id: str, limit: int = 50) -> List[ConversionRecord]:
        self._ensure_initialized()
        rows = await self._db.fetch(
            """
            SELECT data FROM conversion_history
            WHERE owner_id = $1
            ORDER BY created_at DESC
            LIMIT $2
            """,
            owner_id,
            limit,
        )
        return [ConversionRecord.from_dict(self._load(r["data"])) for r in rows]

    # -- Helpers --------------------------------------------------------------

    @staticmethod
    def _execution_data(execution: ConversionRoutineExecution) -> dict:
        """Execution dict without steps; steps live in their own table."""
        data = execution.to_dict()
        data.pop("steps", None)
        return data

    @staticmethod
    def _step_args(execution_id: str, step: WorkflowStep) -> tuple:
        return (
            step.id,
            execution_id,
            step.step_number,
            step.status.value,
            json.dumps(step.to_dict()),
            step.timestamp,
        )

    @staticmethod
    def _load(data) -> dict:
        """JSONB comes back as str unless a codec is registered."""
        if isinstance(data, str):
            return json.loads(data)
        return dict(data)

    @classmethod
    def _parse_template(cls, row) -> RoutineTemplate:
        data = cls._load(row["data"])
        data["usage_count"] = row["usage_count"]
        data["last_used"] = row["last_used"]
        return RoutineTemplate.from_dict(data)

    @staticmethod
    def _parse_row_count(result: str) -> int:
        """Extract row count from asyncpg status strings like 'DELETE 1'."""
        try:
            return int(result.split()[-1])
        except (ValueError, IndexError, AttributeError):
            return 0
