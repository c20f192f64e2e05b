"""
Tests for RoutineManager

Tests cover:
- Running steps through the conversion agent
- Carry forward / submit / skip flows
- Templates: save, list, delete, replay with usage tracking
- Conversion history
- Storage failures are logged and dropped
- Concurrent submissions against one routine are serialized
- Discarding and evicting executions held in memory
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from convertext import ConversionAgent
from convertext.errors import (
    PersistenceError,
    RoutineNotFoundError,
    StepTransitionError,
    TemplateNotFoundError,
)
from convertext.evaluator import HeuristicEvaluator
from convertext.routine import RoutineStatus, StepStatus
from convertext.routine.manager import RoutineManager
from convertext.storage import MemoryStorage, RoutineStorage
from convertext.tools import ToolRegistry


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def manager(storage):
    agent = ConversionAgent(HeuristicEvaluator(), ToolRegistry())
    return RoutineManager(agent, storage)


def _failing_storage() -> AsyncMock:
    storage = AsyncMock(spec=RoutineStorage)
    for name in (
        "create_execution", "update_execution", "create_step", "update_step",
        "list_templates", "get_template", "save_template", "delete_template",
        "increment_usage", "save_conversion", "list_conversions",
    ):
        getattr(storage, name).side_effect = PersistenceError("database unavailable")
    return storage


class SlowStepStorage(MemoryStorage):
    """Memory storage whose step inserts yield to the event loop"""

    async def create_step(self, execution_id, step):
        await asyncio.sleep(0.01)
        await super().create_step(execution_id, step)


async def _wait_for_step(manager, execution_id):
    while not manager.get_execution(execution_id).steps:
        await asyncio.sleep(0)
    return manager.get_execution(execution_id).steps[-1]


class TestExecutions:

    async def test_create(self, manager, storage):
        execution = await manager.create_execution(owner_id="alice")

        assert execution.name == "ConverText"
        assert execution.provider == "heuristic"
        assert manager.get_execution(execution.id) is execution
        stored = await storage.get_execution(execution.id)
        assert stored.owner_id == "alice"

    def test_get_unknown(self, manager):
        with pytest.raises(RoutineNotFoundError):
            manager.get_execution("routine_missing")

    async def test_add_and_run_step(self, manager, storage):
        execution = await manager.create_execution()
        execution = await manager.add_and_run_step(
            execution.id, "the quick brown fox", "Capitalize all words"
        )

        step = execution.steps[0]
        assert step.status == StepStatus.COMPLETED
        assert step.output.result.converted_text == "The Quick Brown Fox"
        assert step.output.evaluation.tool == "capitalize"
        assert step.duration_ms is not None
        assert execution.status == RoutineStatus.COMPLETED

        stored = await storage.get_execution(execution.id)
        assert stored.steps[0].status == StepStatus.COMPLETED
        assert stored.status == RoutineStatus.COMPLETED

    async def test_failed_conversion_marks_step_error(self, storage):
        evaluator = AsyncMock()
        evaluator.provider = "fake"
        evaluator.evaluate.side_effect = RuntimeError("backend down")
        manager = RoutineManager(ConversionAgent(evaluator, ToolRegistry()), storage)

        execution = await manager.create_execution()
        execution = await manager.add_and_run_step(execution.id, "hello", "uppercase")

        assert execution.steps[0].status == StepStatus.ERROR
        assert execution.steps[0].error == "backend down"
        assert execution.status == RoutineStatus.ERROR

    async def test_run_completed_step_rejected(self, manager):
        execution = await manager.create_execution()
        execution = await manager.add_and_run_step(execution.id, "a", "uppercase")

        with pytest.raises(StepTransitionError):
            await manager.run_step(execution.id, execution.steps[0].id)

    async def test_run_step_with_caller_args(self, manager):
        execution = await manager.create_execution()
        execution = await manager.append_step(execution.id, "ab", "repeat this")
        execution = await manager.run_step(execution.id, execution.steps[0].id, ["2"])

        assert execution.steps[0].output.result.converted_text == "ab\nab"


class TestChaining:

    async def test_carry_forward_and_submit(self, manager):
        execution = await manager.create_execution()
        execution = await manager.add_and_run_step(execution.id, "hello world", "uppercase")
        first_id = execution.steps[0].id

        execution = await manager.carry_forward(execution.id, first_id)
        editing = execution.steps[1]
        assert editing.status == StepStatus.EDITING
        assert editing.input.text == "HELLO WORLD"
        assert execution.status == RoutineStatus.IDLE

        execution = await manager.submit_step(execution.id, editing.id, "lowercase")
        assert execution.steps[1].status == StepStatus.COMPLETED
        assert execution.steps[1].output.result.converted_text == "hello world"
        assert execution.status == RoutineStatus.COMPLETED

    async def test_skip(self, manager):
        execution = await manager.create_execution()
        execution = await manager.append_step(execution.id, "a", "uppercase")
        execution = await manager.skip_step(execution.id, execution.steps[0].id)

        assert execution.steps[0].status == StepStatus.SKIPPED
        assert execution.status == RoutineStatus.IDLE

    async def test_concurrent_submissions_serialized(self, manager):
        execution = await manager.create_execution()
        execution_id = execution.id

        await asyncio.gather(*[
            manager.add_and_run_step(execution_id, f"text {i}", "uppercase")
            for i in range(5)
        ])

        execution = manager.get_execution(execution_id)
        assert len(execution.steps) == 5
        assert [s.step_number for s in execution.steps] == [1, 2, 3, 4, 5]
        assert all(s.status == StepStatus.COMPLETED for s in execution.steps)

    async def test_skip_waits_for_add_and_run(self):
        manager = RoutineManager(ConversionAgent(HeuristicEvaluator(), ToolRegistry()), SlowStepStorage())
        execution = await manager.create_execution()
        run = asyncio.create_task(manager.add_and_run_step(execution.id, "abc", "uppercase"))
        step = await _wait_for_step(manager, execution.id)

        with pytest.raises(StepTransitionError):
            await manager.skip_step(execution.id, step.id)

        execution = await run
        assert execution.steps[0].status == StepStatus.COMPLETED
        assert execution.steps[0].output.result.converted_text == "ABC"


class TestMemoryBounds:

    async def test_discard(self, manager, storage):
        execution = await manager.create_execution()
        await manager.add_and_run_step(execution.id, "a", "uppercase")

        assert await manager.discard_execution(execution.id) is True

        with pytest.raises(RoutineNotFoundError):
            manager.get_execution(execution.id)
        assert execution.id not in manager._locks
        assert await storage.get_execution(execution.id) is not None
        assert await manager.discard_execution(execution.id) is False

    async def test_oldest_idle_evicted(self, storage):
        manager = RoutineManager(
            ConversionAgent(HeuristicEvaluator(), ToolRegistry()), storage, max_executions=2
        )
        first = await manager.create_execution()
        await manager.add_and_run_step(first.id, "a", "uppercase")
        second = await manager.create_execution()
        third = await manager.create_execution()

        with pytest.raises(RoutineNotFoundError):
            manager.get_execution(first.id)
        assert first.id not in manager._locks
        assert manager.get_execution(second.id) is second
        assert manager.get_execution(third.id) is third

    async def test_touched_execution_kept(self, storage):
        manager = RoutineManager(
            ConversionAgent(HeuristicEvaluator(), ToolRegistry()), storage, max_executions=2
        )
        first = await manager.create_execution()
        second = await manager.create_execution()
        await manager.append_step(first.id, "a", "uppercase")
        await manager.create_execution()

        assert manager.get_execution(first.id).steps
        with pytest.raises(RoutineNotFoundError):
            manager.get_execution(second.id)

    async def test_busy_execution_not_evicted(self):
        manager = RoutineManager(
            ConversionAgent(HeuristicEvaluator(), ToolRegistry()),
            SlowStepStorage(),
            max_executions=2,
        )
        busy = await manager.create_execution()
        run = asyncio.create_task(manager.add_and_run_step(busy.id, "a", "uppercase"))
        await _wait_for_step(manager, busy.id)

        idle = await manager.create_execution()
        await manager.create_execution()
        await run

        assert manager.get_execution(busy.id).steps[0].status == StepStatus.COMPLETED
        with pytest.raises(RoutineNotFoundError):
            manager.get_execution(idle.id)


class TestTemplates:

    async def _routine_with_two_steps(self, manager, owner_id="default"):
        execution = await manager.create_execution(owner_id=owner_id)
        execution = await manager.add_and_run_step(execution.id, " a ", "trim whitespace")
        execution = await manager.add_and_run_step(execution.id, "b\na", "sort lines")
        return execution

    async def test_save_and_list(self, manager):
        execution = await self._routine_with_two_steps(manager)
        template = await manager.save_template(execution.id, "Cleanup", "trim then sort")

        templates = await manager.list_templates()
        assert [t.id for t in templates] == [template.id]
        assert [s.task_description for s in templates[0].steps] == ["trim whitespace", "sort lines"]

    async def test_templates_scoped_to_owner(self, manager):
        execution = await self._routine_with_two_steps(manager, owner_id="alice")
        await manager.save_template(execution.id, "Cleanup")

        assert await manager.list_templates("bob") == []
        assert len(await manager.list_templates("alice")) == 1

    async def test_replay_increments_usage(self, manager):
        execution = await self._routine_with_two_steps(manager)
        template = await manager.save_template(execution.id, "Cleanup")

        replayed = await manager.replay_template(template.id)

        assert replayed.saved_routine_id == template.id
        assert [s.status for s in replayed.steps] == [StepStatus.PENDING, StepStatus.PENDING]
        assert manager.get_execution(replayed.id) is replayed

        stored = (await manager.list_templates())[0]
        assert stored.usage_count == 1
        assert stored.last_used is not None

    async def test_replay_unknown(self, manager):
        with pytest.raises(TemplateNotFoundError):
            await manager.replay_template("template_missing")

    async def test_delete(self, manager):
        execution = await self._routine_with_two_steps(manager)
        template = await manager.save_template(execution.id, "Cleanup")

        assert await manager.delete_template(template.id) is True
        assert await manager.delete_template(template.id) is False
        assert await manager.list_templates() == []


class TestHistory:

    async def test_steps_recorded(self, manager):
        execution = await manager.create_execution(owner_id="alice")
        execution = await manager.add_and_run_step(execution.id, "abc", "uppercase")

        history = await manager.list_history("alice")
        assert len(history) == 1
        assert history[0].step_id == execution.steps[0].id
        assert history[0].result.converted_text == "ABC"
        assert history[0].task_description == "uppercase"
        assert history[0].provider == "heuristic"

    async def test_limit(self, manager):
        execution = await manager.create_execution()
        for i in range(3):
            await manager.add_and_run_step(execution.id, f"t{i}", "uppercase")

        history = await manager.list_history(limit=2)
        assert [r.result.converted_text for r in history] == ["T2", "T1"]


class TestStorageFailures:

    async def test_transitions_stand(self):
        agent = ConversionAgent(HeuristicEvaluator(), ToolRegistry())
        manager = RoutineManager(agent, _failing_storage())

        execution = await manager.create_execution()
        execution = await manager.add_and_run_step(execution.id, "abc", "uppercase")

        assert execution.steps[0].status == StepStatus.COMPLETED
        assert manager.get_execution(execution.id).status == RoutineStatus.COMPLETED

    async def test_record_conversion_reports_failure(self):
        agent = ConversionAgent(HeuristicEvaluator(), ToolRegistry())
        manager = RoutineManager(agent, _failing_storage())
        _, result = await agent.process_with_evaluation("a", "uppercase")

        outcome = await manager.record_conversion(result, "uppercase")

        assert outcome.ok is False
        assert outcome.operation == "save_conversion"
        assert outcome.error == "database unavailable"

    async def test_reads_degrade_to_empty(self):
        agent = ConversionAgent(HeuristicEvaluator(), ToolRegistry())
        manager = RoutineManager(agent, _failing_storage())

        assert await manager.list_templates() == []
        assert await manager.list_history() == []
        assert await manager.delete_template("template_1") is False
        with pytest.raises(TemplateNotFoundError):
            await manager.replay_template("template_1")
