"""
ConverText Routine Manager - Runs routine steps and mirrors them to storage

Executions live in memory here; storage is written after every transition
but never consulted for executions the manager already owns. A storage
failure is logged and dropped, so the in-memory transition always stands.
Templates and history are read through storage.

At most ``max_executions`` executions are held; past that the least recently
touched ones that are not running are dropped from memory. Their last state
is already in storage.
"""

import asyncio
import logging
import time
from typing import Awaitable, Dict, List, Optional, Sequence

from ..agent import ConversionAgent
from ..constants import DEFAULT_MAX_EXECUTIONS, DEFAULT_OWNER_ID, DEFAULT_ROUTINE_NAME
from ..errors import RoutineNotFoundError, StepTransitionError, TemplateNotFoundError
from ..models import ConversionResult
from ..storage.base import ConversionRecord, PersistenceResult, RoutineStorage
from ..storage.memory import MemoryStorage
from . import state
from .models import (
    ConversionRoutineExecution,
    RoutineStatus,
    RoutineTemplate,
    StepOutput,
    StepStatus,
    WorkflowStep,
)

logger = logging.getLogger(__name__)


class RoutineManager:
    """
    Owns routine executions and drives the conversion agent for each step.

    Mutations of one execution are serialized by a per-execution lock, so
    concurrent submissions against the same routine run one after another.

    Example:
        manager = RoutineManager(ConversionAgent(), MemoryStorage())
        execution = await manager.create_execution(owner_id="alice")
        execution = await manager.add_and_run_step(
            execution.id, "a,b\\n1,2", "csv to json"
        )
        execution.steps[-1].output.result.converted_text
    """

    def __init__(
        self,
        agent: ConversionAgent,
        storage: Optional[RoutineStorage] = None,
        default_name: str = DEFAULT_ROUTINE_NAME,
        max_executions: int = DEFAULT_MAX_EXECUTIONS,
    ):
        self.agent = agent
        self.storage = storage or MemoryStorage()
        self.default_name = default_name
        self.max_executions = max_executions
        self._executions: Dict[str, ConversionRoutineExecution] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # -- Executions -----------------------------------------------------------

    async def create_execution(
        self,
        name: Optional[str] = None,
        owner_id: str = DEFAULT_OWNER_ID,
    ) -> ConversionRoutineExecution:
        execution = state.create_execution(
            name=name or self.default_name,
            provider=self.agent.provider,
            owner_id=owner_id,
        )
        self._remember(execution)
        await self._persist("create_execution", self.storage.create_execution(execution))
        logger.info(f"Routine {execution.id} created for owner {owner_id}")
        return execution

    def get_execution(self, execution_id: str) -> ConversionRoutineExecution:
        """
        Raises:
            RoutineNotFoundError: Unknown execution id
        """
        execution = self._executions.get(execution_id)
        if execution is None:
            raise RoutineNotFoundError(execution_id)
        return execution

    async def append_step(
        self,
        execution_id: str,
        text: str = "",
        task_description: str = "",
        example_output: Optional[str] = None,
    ) -> ConversionRoutineExecution:
        """Add a pending step without running it."""
        async with self._lock(execution_id):
            return await self._append(execution_id, text, task_description, example_output)

    async def run_step(
        self,
        execution_id: str,
        step_id: str,
        tool_args: Optional[Sequence[str]] = None,
    ) -> ConversionRoutineExecution:
        """
        Run a pending step: evaluate its task, execute the tool, record the result.

        Raises:
            RoutineNotFoundError, StepNotFoundError, StepTransitionError
        """
        async with self._lock(execution_id):
            return await self._start_and_run(self.get_execution(execution_id), step_id, tool_args)

    async def add_and_run_step(
        self,
        execution_id: str,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
        tool_args: Optional[Sequence[str]] = None,
    ) -> ConversionRoutineExecution:
        """Append a step and run it under a single hold of the routine's lock."""
        async with self._lock(execution_id):
            execution = await self._append(execution_id, text, task_description, example_output)
            return await self._start_and_run(execution, execution.steps[-1].id, tool_args)

    async def carry_forward(self, execution_id: str, from_step_id: str) -> ConversionRoutineExecution:
        """Open a new editing step holding a step's converted text."""
        async with self._lock(execution_id):
            execution = state.carry_forward(self.get_execution(execution_id), from_step_id)
            await self._commit(execution, new_step=execution.steps[-1])
            return execution

    async def submit_step(
        self,
        execution_id: str,
        step_id: str,
        task_description: str,
        example_output: Optional[str] = None,
        text: Optional[str] = None,
        tool_args: Optional[Sequence[str]] = None,
    ) -> ConversionRoutineExecution:
        """Give an editing or pending step its task and run it."""
        async with self._lock(execution_id):
            execution = state.submit_step(
                self.get_execution(execution_id), step_id, task_description, example_output, text
            )
            await self._commit(execution, step_id=step_id)
            return await self._run_running_step(execution, step_id, tool_args)

    async def skip_step(self, execution_id: str, step_id: str) -> ConversionRoutineExecution:
        async with self._lock(execution_id):
            execution = state.update_step_status(
                self.get_execution(execution_id), step_id, StepStatus.SKIPPED
            )
            await self._commit(execution, step_id=step_id)
            return execution

    async def discard_execution(self, execution_id: str) -> bool:
        """
        Drop an execution from memory; what storage holds is left alone.

        Returns:
            False when the execution was not held
        """
        async with self._lock(execution_id):
            existed = self._executions.pop(execution_id, None) is not None
        self._locks.pop(execution_id, None)
        if existed:
            logger.info(f"Routine {execution_id} discarded")
        return existed

    async def _append(
        self,
        execution_id: str,
        text: str,
        task_description: str,
        example_output: Optional[str],
    ) -> ConversionRoutineExecution:
        execution = state.append_step(
            self.get_execution(execution_id), text, task_description, example_output
        )
        await self._commit(execution, new_step=execution.steps[-1])
        return execution

    async def _start_and_run(
        self,
        execution: ConversionRoutineExecution,
        step_id: str,
        tool_args: Optional[Sequence[str]],
    ) -> ConversionRoutineExecution:
        execution = state.update_step_status(execution, step_id, StepStatus.RUNNING)
        await self._commit(execution, step_id=step_id)
        return await self._run_running_step(execution, step_id, tool_args)

    async def _run_running_step(
        self,
        execution: ConversionRoutineExecution,
        step_id: str,
        tool_args: Optional[Sequence[str]],
    ) -> ConversionRoutineExecution:
        step = execution.get_step(step_id)
        if step is None or step.status != StepStatus.RUNNING:
            raise StepTransitionError(f"Step '{step_id}' is not running")

        started = time.monotonic()
        evaluation, result = await self.agent.process_with_evaluation(
            step.input.text,
            step.input.task_description,
            step.input.example_output,
            tool_args,
        )
        duration_ms = int((time.monotonic() - started) * 1000)

        execution = state.update_step_status(
            execution,
            step_id,
            StepStatus.ERROR if result.error else StepStatus.COMPLETED,
            output=StepOutput(result=result, evaluation=evaluation),
            error=result.error,
            duration_ms=duration_ms,
        )
        await self._commit(execution, step_id=step_id)
        await self.record_conversion(
            result,
            step.input.task_description,
            owner_id=execution.owner_id,
            step_id=step_id,
        )
        logger.info(
            f"Routine {execution.id} step {step.step_number}: "
            f"{result.tool_used} in {duration_ms}ms"
        )
        return execution

    # -- Templates ------------------------------------------------------------

    async def save_template(
        self,
        execution_id: str,
        name: str,
        description: str = "",
    ) -> RoutineTemplate:
        template = state.template_from_execution(
            self.get_execution(execution_id), name, description
        )
        await self._persist("save_template", self.storage.save_template(template))
        return template

    async def list_templates(self, owner_id: str = DEFAULT_OWNER_ID) -> List[RoutineTemplate]:
        templates = await self._read("list_templates", self.storage.list_templates(owner_id))
        return templates or []

    async def delete_template(self, template_id: str, owner_id: str = DEFAULT_OWNER_ID) -> bool:
        deleted = await self._read(
            "delete_template", self.storage.delete_template(template_id, owner_id)
        )
        return bool(deleted)

    async def replay_template(
        self,
        template_id: str,
        owner_id: str = DEFAULT_OWNER_ID,
    ) -> ConversionRoutineExecution:
        """
        Start a fresh execution from a saved template.

        Raises:
            TemplateNotFoundError: Template missing, owned by someone else,
                or unreadable
        """
        template = await self._read(
            "get_template", self.storage.get_template(template_id, owner_id)
        )
        if template is None:
            raise TemplateNotFoundError(template_id)

        execution = state.replay_template(template, self.agent.provider, owner_id)
        self._remember(execution)
        await self._persist("create_execution", self.storage.create_execution(execution))
        await self._persist(
            "increment_usage", self.storage.increment_usage(template_id, owner_id)
        )
        logger.info(f"Routine {execution.id} replayed from template {template_id}")
        return execution

    # -- History --------------------------------------------------------------

    async def record_conversion(
        self,
        result: ConversionResult,
        task_description: str,
        owner_id: str = DEFAULT_OWNER_ID,
        step_id: Optional[str] = None,
    ) -> PersistenceResult:
        record = ConversionRecord(
            result=result,
            task_description=task_description,
            provider=self.agent.provider,
            owner_id=owner_id,
            step_id=step_id,
        )
        return await self._persist("save_conversion", self.storage.save_conversion(record))

    async def list_history(
        self,
        owner_id: str = DEFAULT_OWNER_ID,
        limit: int = 50,
    ) -> List[ConversionRecord]:
        records = await self._read("list_conversions", self.storage.list_conversions(owner_id, limit))
        return records or []

    # -- Internals ------------------------------------------------------------

    def _lock(self, execution_id: str) -> asyncio.Lock:
        lock = self._locks.get(execution_id)
        if lock is None:
            lock = self._locks[execution_id] = asyncio.Lock()
        return lock

    def _remember(self, execution: ConversionRoutineExecution) -> None:
        """Hold as most recently touched, then drop the oldest idle executions."""
        self._executions.pop(execution.id, None)
        self._executions[execution.id] = execution
        for execution_id in list(self._executions):
            if len(self._executions) <= self.max_executions:
                break
            if execution_id == execution.id:
                continue
            lock = self._locks.get(execution_id)
            if lock is not None and lock.locked():
                continue
            if self._executions[execution_id].status == RoutineStatus.RUNNING:
                continue
            del self._executions[execution_id]
            self._locks.pop(execution_id, None)
            logger.debug(f"Routine {execution_id} evicted from memory")

    async def _commit(
        self,
        execution: ConversionRoutineExecution,
        step_id: Optional[str] = None,
        new_step: Optional[WorkflowStep] = None,
    ) -> None:
        """Keep the new execution and mirror the touched step to storage."""
        self._remember(execution)
        if new_step is not None:
            await self._persist("create_step", self.storage.create_step(execution.id, new_step))
        elif step_id is not None:
            step = execution.get_step(step_id)
            await self._persist("update_step", self.storage.update_step(execution.id, step))
        await self._persist("update_execution", self.storage.update_execution(execution))

    async def _persist(self, operation: str, coro: Awaitable) -> PersistenceResult:
        """Await a storage write; failures are logged and returned, never raised."""
        try:
            await coro
            return PersistenceResult(ok=True, operation=operation)
        except Exception as e:
            logger.warning(f"Persistence failed ({operation}): {e}")
            return PersistenceResult(ok=False, operation=operation, error=str(e))

    async def _read(self, operation: str, coro: Awaitable):
        """Await a storage read; a failure resolves to None."""
        try:
            return await coro
        except Exception as e:
            logger.warning(f"Storage read failed ({operation}): {e}")
            return None
