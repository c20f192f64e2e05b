"""
ConverText Storage - Persistence interface for routines, templates and history

Storage is a collaborator, not a source of truth: the routine manager keeps
executions in memory and only mirrors them here. Every write is reported back
as a PersistenceResult so a failure can be logged and dropped.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..constants import DEFAULT_OWNER_ID
from ..models import ConversionResult
from ..routine.models import (
    ConversionRoutineExecution,
    RoutineTemplate,
    WorkflowStep,
    generate_id,
)


@dataclass
class PersistenceResult:
    """Outcome of one storage call"""
    ok: bool
    operation: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "operation": self.operation, "error": self.error}


@dataclass
class ConversionRecord:
    """One row of conversion history"""
    result: ConversionResult
    task_description: str
    provider: str
    owner_id: str = DEFAULT_OWNER_ID
    step_id: Optional[str] = None
    id: str = field(default_factory=lambda: generate_id("conv"))
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "result": self.result.to_dict(),
            "task_description": self.task_description,
            "provider": self.provider,
            "step_id": self.step_id,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionRecord":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=data["id"],
            owner_id=data.get("owner_id", DEFAULT_OWNER_ID),
            result=ConversionResult.from_dict(data["result"]),
            task_description=data.get("task_description", ""),
            provider=data.get("provider", ""),
            step_id=data.get("step_id"),
            created_at=created_at or datetime.now(),
        )


class RoutineStorage(ABC):
    """
    Owner-scoped persistence for executions, templates and history.

    Implementations raise on failure; the routine manager decides what a
    failure means.
    """

    async def initialize(self) -> None:
        """Prepare the backend (tables, pools). Optional."""
        return None

    async def close(self) -> None:
        """Release backend resources. Optional."""
        return None

    # -- Executions -----------------------------------------------------------

    @abstractmethod
    async def create_execution(self, execution: ConversionRoutineExecution) -> None:
        pass

    @abstractmethod
    async def update_execution(self, execution: ConversionRoutineExecution) -> None:
        pass

    @abstractmethod
    async def create_step(self, execution_id: str, step: WorkflowStep) -> None:
        pass

    @abstractmethod
    async def update_step(self, execution_id: str, step: WorkflowStep) -> None:
        pass

    # -- Templates ------------------------------------------------------------

    @abstractmethod
    async def list_templates(self, owner_id: str) -> List[RoutineTemplate]:
        """Templates of one owner, most recently created first"""
        pass

    @abstractmethod
    async def get_template(self, template_id: str, owner_id: str) -> Optional[RoutineTemplate]:
        pass

    @abstractmethod
    async def save_template(self, template: RoutineTemplate) -> None:
        pass

    @abstractmethod
    async def delete_template(self, template_id: str, owner_id: str) -> bool:
        """Returns True if a template was deleted"""
        pass

    @abstractmethod
    async def increment_usage(self, template_id: str, owner_id: str) -> None:
        """Bump usage_count and set last_used to now"""
        pass

    # -- History --------------------------------------------------------------

    @abstractmethod
    async def save_conversion(self, record: ConversionRecord) -> None:
        pass

    @abstractmethod
    async def list_conversions(self, owner_id: str, limit: int = 50) -> List[ConversionRecord]:
        """History of one owner, newest first"""
        pass
