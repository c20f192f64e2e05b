"""In-memory RoutineStorage for development and tests."""

from datetime import datetime
from typing import Dict, List, Optional

from ..routine.models import ConversionRoutineExecution, RoutineTemplate, WorkflowStep
from ..errors import PersistenceError
from .base import ConversionRecord, RoutineStorage


class MemoryStorage(RoutineStorage):
    """
    Dict-backed storage. Contents are lost when the process exits.

    Objects are stored as serialized dicts so later mutation by the caller
    never leaks into what was saved.
    """

    def __init__(self):
        self._executions: Dict[str, dict] = {}
        self._templates: Dict[str, dict] = {}
        self._conversions: List[dict] = []

    async def create_execution(self, execution: ConversionRoutineExecution) -> None:
        self._executions[execution.id] = execution.to_dict()

    async def update_execution(self, execution: ConversionRoutineExecution) -> None:
        if execution.id not in self._executions:
            raise PersistenceError(f"Execution '{execution.id}' not stored")
        self._executions[execution.id] = execution.to_dict()

    async def get_execution(self, execution_id: str) -> Optional[ConversionRoutineExecution]:
        data = self._executions.get(execution_id)
        return ConversionRoutineExecution.from_dict(data) if data else None

    async def create_step(self, execution_id: str, step: WorkflowStep) -> None:
        steps = self._stored_steps(execution_id)
        steps.append(step.to_dict())

    async def update_step(self, execution_id: str, step: WorkflowStep) -> None:
        steps = self._stored_steps(execution_id)
        for i, stored in enumerate(steps):
            if stored["id"] == step.id:
                steps[i] = step.to_dict()
                return
        raise PersistenceError(f"Step '{step.id}' not stored")

    def _stored_steps(self, execution_id: str) -> List[dict]:
        data = self._executions.get(execution_id)
        if data is None:
            raise PersistenceError(f"Execution '{execution_id}' not stored")
        return data["steps"]

    async def list_templates(self, owner_id: str) -> List[RoutineTemplate]:
        templates = [
            RoutineTemplate.from_dict(t)
            for t in self._templates.values()
            if t["owner_id"] == owner_id
        ]
        return sorted(templates, key=lambda t: t.created_at, reverse=True)

    async def get_template(self, template_id: str, owner_id: str) -> Optional[RoutineTemplate]:
        data = self._templates.get(template_id)
        if data is None or data["owner_id"] != owner_id:
            return None
        return RoutineTemplate.from_dict(data)

    async def save_template(self, template: RoutineTemplate) -> None:
        self._templates[template.id] = template.to_dict()

    async def delete_template(self, template_id: str, owner_id: str) -> bool:
        data = self._templates.get(template_id)
        if data is None or data["owner_id"] != owner_id:
            return False
        del self._templates[template_id]
        return True

    async def increment_usage(self, template_id: str, owner_id: str) -> None:
        data = self._templates.get(template_id)
        if data is None or data["owner_id"] != owner_id:
            raise PersistenceError(f"Template '{template_id}' not stored")
        data["usage_count"] = data.get("usage_count", 0) + 1
        data["last_used"] = datetime.now().isoformat()

    async def save_conversion(self, record: ConversionRecord) -> None:
        self._conversions.append(record.to_dict())

    async def list_conversions(self, owner_id: str, limit: int = 50) -> List[ConversionRecord]:
        rows = [r for r in reversed(self._conversions) if r["owner_id"] == owner_id]
        return [ConversionRecord.from_dict(r) for r in rows[:limit]]
