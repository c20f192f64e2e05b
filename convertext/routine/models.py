"""
ConverText Routine Models - Data structures for multi-step conversion routines

This module defines:
- WorkflowStep: One evaluate-then-execute run with its input and output
- ConversionRoutineExecution: Ordered steps plus the derived routine status
- RoutineTemplate / StepTemplate: Text-free, replayable routine definitions
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..constants import DEFAULT_OWNER_ID, DEFAULT_ROUTINE_NAME, PROVIDER_HEURISTIC
from ..models import ConversionResult, ToolEvaluation


class StepStatus(str, Enum):
    """Lifecycle of a single step"""
    PENDING = "pending"         # Created, waiting for input or a run
    RUNNING = "running"         # Evaluation/execution in flight
    COMPLETED = "completed"     # Finished with a result
    ERROR = "error"             # Finished with an error
    SKIPPED = "skipped"         # Deliberately not run
    EDITING = "editing"         # Carried-forward text awaiting a task

    @property
    def is_terminal(self) -> bool:
        return self in (StepStatus.COMPLETED, StepStatus.ERROR, StepStatus.SKIPPED)


class RoutineStatus(str, Enum):
    """Aggregate status derived from the steps"""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class StepInput:
    """What the user asked for in one step"""
    text: str = ""
    task_description: str = ""
    example_output: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "task_description": self.task_description,
            "example_output": self.example_output,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepInput":
        return cls(
            text=data.get("text", ""),
            task_description=data.get("task_description", ""),
            example_output=data.get("example_output"),
        )


@dataclass
class StepOutput:
    """Result of a step run, with the evaluation that selected the tool"""
    result: ConversionResult
    evaluation: Optional[ToolEvaluation] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.to_dict(),
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepOutput":
        evaluation = data.get("evaluation")
        return cls(
            result=ConversionResult.from_dict(data["result"]),
            evaluation=ToolEvaluation.from_dict(evaluation) if evaluation else None,
        )


@dataclass
class WorkflowStep:
    """
    One step of a routine.

    Steps are never modified once terminal; a retry is a new step.
    """
    id: str
    step_number: int
    status: StepStatus = StepStatus.PENDING
    input: StepInput = field(default_factory=StepInput)
    output: Optional[StepOutput] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    duration_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "step_number": self.step_number,
            "status": self.status.value,
            "input": self.input.to_dict(),
            "output": self.output.to_dict() if self.output else None,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowStep":
        output = data.get("output")
        return cls(
            id=data["id"],
            step_number=int(data["step_number"]),
            status=StepStatus(data.get("status", StepStatus.PENDING.value)),
            input=StepInput.from_dict(data.get("input") or {}),
            output=StepOutput.from_dict(output) if output else None,
            error=data.get("error"),
            timestamp=_parse_datetime(data.get("timestamp")) or datetime.now(),
            duration_ms=data.get("duration_ms"),
        )


@dataclass
class ConversionRoutineExecution:
    """
    A routine being worked on: ordered steps and their aggregate status.

    ``status`` is always the value computed from ``steps``; the state
    functions recompute it on every change.
    """
    id: str
    name: str = DEFAULT_ROUTINE_NAME
    steps: List[WorkflowStep] = field(default_factory=list)
    current_step_index: int = 0
    status: RoutineStatus = RoutineStatus.IDLE
    provider: str = PROVIDER_HEURISTIC
    owner_id: str = DEFAULT_OWNER_ID
    created_at: datetime = field(default_factory=datetime.now)
    last_updated: datetime = field(default_factory=datetime.now)
    saved_routine_id: Optional[str] = None

    def get_step(self, step_id: str) -> Optional[WorkflowStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "steps": [s.to_dict() for s in self.steps],
            "current_step_index": self.current_step_index,
            "status": self.status.value,
            "provider": self.provider,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "saved_routine_id": self.saved_routine_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionRoutineExecution":
        return cls(
            id=data["id"],
            name=data.get("name", DEFAULT_ROUTINE_NAME),
            steps=[WorkflowStep.from_dict(s) for s in data.get("steps") or []],
            current_step_index=int(data.get("current_step_index", 0)),
            status=RoutineStatus(data.get("status", RoutineStatus.IDLE.value)),
            provider=data.get("provider", PROVIDER_HEURISTIC),
            owner_id=data.get("owner_id", DEFAULT_OWNER_ID),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
            last_updated=_parse_datetime(data.get("last_updated")) or datetime.now(),
            saved_routine_id=data.get("saved_routine_id"),
        )


@dataclass
class StepTemplate:
    """A step definition without text"""
    id: str
    step_number: int
    task_description: str
    example_output: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "step_number": self.step_number,
            "task_description": self.task_description,
            "example_output": self.example_output,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepTemplate":
        return cls(
            id=data.get("id") or generate_id("tstep"),
            step_number=int(data["step_number"]),
            task_description=data.get("task_description", ""),
            example_output=data.get("example_output"),
        )


@dataclass
class RoutineTemplate:
    """A saved, reusable routine"""
    id: str
    name: str
    description: str = ""
    steps: List[StepTemplate] = field(default_factory=list)
    owner_id: str = DEFAULT_OWNER_ID
    created_at: datetime = field(default_factory=datetime.now)
    last_used: Optional[datetime] = None
    usage_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "steps": [s.to_dict() for s in self.steps],
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat(),
            "last_used": _format_datetime(self.last_used),
            "usage_count": self.usage_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoutineTemplate":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description") or "",
            steps=[StepTemplate.from_dict(s) for s in data.get("steps") or []],
            owner_id=data.get("owner_id", DEFAULT_OWNER_ID),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
            last_used=_parse_datetime(data.get("last_used")),
            usage_count=int(data.get("usage_count", 0)),
        )
