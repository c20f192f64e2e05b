"""
ConverText Routines - Multi-step conversions and replayable templates

- models: steps, executions, templates
- state: pure transition functions and the status reducer
- manager: RoutineManager (import from ``convertext.routine.manager``)
"""

from .models import (
    StepStatus,
    RoutineStatus,
    StepInput,
    StepOutput,
    WorkflowStep,
    ConversionRoutineExecution,
    StepTemplate,
    RoutineTemplate,
)
from .state import (
    compute_routine_status,
    create_execution,
    append_step,
    update_step_status,
    carry_forward,
    submit_step,
    replay_template,
    template_from_execution,
)

__all__ = [
    "StepStatus",
    "RoutineStatus",
    "StepInput",
    "StepOutput",
    "WorkflowStep",
    "ConversionRoutineExecution",
    "StepTemplate",
    "RoutineTemplate",
    "compute_routine_status",
    "create_execution",
    "append_step",
    "update_step_status",
    "carry_forward",
    "submit_step",
    "replay_template",
    "template_from_execution",
]
