"""Tests for convertext.storage.PostgreSQLStorage against a mocked Database"""

import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from convertext.db import Database
from convertext.errors import PersistenceError
from convertext.models import ConversionResult
from convertext.routine import RoutineTemplate, StepTemplate, append_step, create_execution
from convertext.storage import ConversionRecord, PostgreSQLStorage
from convertext.storage.postgres_storage import SCHEMA_SQL


def _make_db() -> AsyncMock:
    db = AsyncMock(spec=Database)
    db.execute.return_value = "INSERT 0 1"
    db.fetch.return_value = []
    db.fetchrow.return_value = None
    conn = AsyncMock()
    conn.execute.return_value = "INSERT 0 1"
    transaction = MagicMock()
    transaction.__aenter__.return_value = conn
    transaction.__aexit__.return_value = False
    db.transaction = MagicMock(return_value=transaction)
    return db


def _transaction_conn(db) -> AsyncMock:
    """Connection handed out by db.transaction()"""
    return db.transaction.return_value.__aenter__.return_value


@pytest.fixture
def db():
    return _make_db()


@pytest.fixture
async def storage(db):
    storage = PostgreSQLStorage(db=db)
    await storage.initialize()
    db.execute.reset_mock()
    return storage


class TestLifecycle:
    def test_requires_db_or_dsn(self):
        with pytest.raises(ValueError):
            PostgreSQLStorage()

    async def test_initialize_creates_schema(self, db):
        storage = PostgreSQLStorage(db=db)
        await storage.initialize()
        await storage.initialize()

        db.initialize.assert_awaited_once()
        assert db.execute.await_count == len(SCHEMA_SQL)

    async def test_use_before_initialize(self, db):
        storage = PostgreSQLStorage(db=db)
        with pytest.raises(RuntimeError, match="not initialized"):
            await storage.list_templates("alice")

    async def test_shared_db_not_closed(self, storage, db):
        await storage.close()
        db.close.assert_not_awaited()


class TestDatabaseTransaction:
    @staticmethod
    def _pooled_db():
        conn = MagicMock()
        conn.execute = AsyncMock(return_value="INSERT 0 1")
        pool = MagicMock()
        pool.acquire.return_value.__aenter__.return_value = conn
        database = Database(dsn="postgresql://localhost/test")
        database._pool = pool
        return database, pool, conn

    async def test_one_connection_inside_transaction(self):
        database, pool, conn = self._pooled_db()

        async with database.transaction() as tx_conn:
            await tx_conn.execute("INSERT 1")
            await tx_conn.execute("INSERT 2")

        assert tx_conn is conn
        pool.acquire.assert_called_once()
        conn.transaction.assert_called_once()
        assert conn.execute.await_count == 2
        assert conn.transaction.return_value.__aexit__.await_args.args[0] is None

    async def test_error_reaches_transaction_exit(self):
        database, _, conn = self._pooled_db()

        with pytest.raises(ValueError):
            async with database.transaction():
                raise ValueError("bad row")

        assert conn.transaction.return_value.__aexit__.await_args.args[0] is ValueError


class TestExecutions:
    async def test_create_writes_execution_and_steps(self, storage, db):
        execution = append_step(create_execution(owner_id="alice"), "a", "uppercase")
        conn = _transaction_conn(db)

        await storage.create_execution(execution)

        db.transaction.assert_called_once()
        db.execute.assert_not_awaited()
        assert conn.execute.await_count == 2
        execution_args = conn.execute.await_args_list[0].args
        assert "INSERT INTO routine_executions" in execution_args[0]
        assert execution_args[1] == execution.id
        assert execution_args[2] == "alice"
        assert "steps" not in json.loads(execution_args[7])
        step_args = conn.execute.await_args_list[1].args
        assert "INSERT INTO routine_steps" in step_args[0]
        assert step_args[1] == execution.steps[0].id

    async def test_failed_step_insert_aborts_transaction(self, storage, db):
        execution = append_step(create_execution(owner_id="alice"), "a", "uppercase")
        conn = _transaction_conn(db)
        conn.execute.side_effect = ["INSERT 0 1", ConnectionError("connection lost")]

        with pytest.raises(ConnectionError):
            await storage.create_execution(execution)

        exit_args = db.transaction.return_value.__aexit__.await_args.args
        assert exit_args[0] is ConnectionError

    async def test_create_step_outside_transaction(self, storage, db):
        execution = append_step(create_execution(), "a", "uppercase")

        await storage.create_step(execution.id, execution.steps[0])

        args = db.execute.await_args.args
        assert "INSERT INTO routine_steps" in args[0]
        assert args[1:3] == (execution.steps[0].id, execution.id)
        db.transaction.assert_not_called()

    async def test_get_execution_joins_steps(self, storage, db):
        execution = append_step(create_execution(), "a", "uppercase")
        data = execution.to_dict()
        step_data = data.pop("steps")
        db.fetchrow.return_value = {"data": json.dumps(data)}
        db.fetch.return_value = [{"data": step_data[0]}]

        stored = await storage.get_execution(execution.id)

        assert stored == execution

    async def test_get_missing_execution(self, storage):
        assert await storage.get_execution("routine_missing") is None


class TestTemplates:
    def _row(self, template, usage_count=0, last_used=None):
        return {
            "data": json.dumps(template.to_dict()),
            "usage_count": usage_count,
            "last_used": last_used,
        }

    async def test_get_template_uses_counter_columns(self, storage, db):
        template = RoutineTemplate(
            id="template_1",
            name="T",
            owner_id="alice",
            steps=[StepTemplate(id="t1", step_number=1, task_description="trim")],
        )
        used = datetime(2025, 2, 1)
        db.fetchrow.return_value = self._row(template, usage_count=4, last_used=used)

        stored = await storage.get_template("template_1", "alice")

        assert stored.usage_count == 4
        assert stored.last_used == used
        assert stored.steps[0].task_description == "trim"
        assert db.fetchrow.await_args.args[1:] == ("template_1", "alice")

    async def test_list_templates(self, storage, db):
        db.fetch.return_value = [self._row(RoutineTemplate(id="template_1", name="T"))]
        templates = await storage.list_templates("default")
        assert [t.id for t in templates] == ["template_1"]

    @pytest.mark.parametrize("status,expected", [("DELETE 1", True), ("DELETE 0", False)])
    async def test_delete_template(self, storage, db, status, expected):
        db.execute.return_value = status
        assert await storage.delete_template("template_1", "alice") is expected

    async def test_increment_usage_missing_raises(self, storage, db):
        db.execute.return_value = "UPDATE 0"
        with pytest.raises(PersistenceError):
            await storage.increment_usage("template_1", "alice")

    async def test_increment_usage(self, storage, db):
        db.execute.return_value = "UPDATE 1"
        await storage.increment_usage("template_1", "alice")
        assert "usage_count = usage_count + 1" in db.execute.await_args.args[0]


class TestConversions:
    async def test_save_and_list(self, storage, db):
        record = ConversionRecord(
            result=ConversionResult(original_text="a", converted_text="A"),
            task_description="uppercase",
            provider="heuristic",
            owner_id="alice",
        )
        await storage.save_conversion(record)
        args = db.execute.await_args.args
        assert args[1:5] == (record.id, "alice", None, "heuristic")

        db.fetch.return_value = [{"data": args[5]}]
        records = await storage.list_conversions("alice", limit=10)

        assert records[0].id == record.id
        assert records[0].result.converted_text == "A"
        assert db.fetch.await_args.args[1:] == ("alice", 10)


class TestParseRowCount:
    @pytest.mark.parametrize("status,expected", [
        ("DELETE 3", 3),
        ("UPDATE 0", 0),
        ("", 0),
        (None, 0),
    ])
    def test_parse(self, status, expected):
        assert PostgreSQLStorage._parse_row_count(status) == expected
