"""
Routine state machine - pure functions over ConversionRoutineExecution

Every function returns a new execution and leaves its input untouched, so
callers can compare before/after or discard a transition freely. The
aggregate status is recomputed by ``compute_routine_status`` after each
change.

Step transitions:
    pending  -> running | skipped | error | editing
    running  -> completed | error
    editing  -> running (only through submit_step)
    completed, error, skipped are terminal
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Optional

from ..constants import DEFAULT_OWNER_ID, DEFAULT_ROUTINE_NAME, PROVIDER_HEURISTIC
from ..errors import StepNotFoundError, StepTransitionError
from .models import (
    ConversionRoutineExecution,
    RoutineStatus,
    RoutineTemplate,
    StepInput,
    StepOutput,
    StepStatus,
    StepTemplate,
    WorkflowStep,
    generate_id,
)

ALLOWED_TRANSITIONS: Dict[StepStatus, FrozenSet[StepStatus]] = {
    StepStatus.PENDING: frozenset({
        StepStatus.RUNNING, StepStatus.SKIPPED, StepStatus.ERROR, StepStatus.EDITING,
    }),
    StepStatus.RUNNING: frozenset({StepStatus.COMPLETED, StepStatus.ERROR}),
}

_FINISHED = (StepStatus.COMPLETED, StepStatus.ERROR)


def compute_routine_status(steps: Iterable[WorkflowStep]) -> RoutineStatus:
    """
    Aggregate status with precedence running > error > completed > idle.

    ``completed`` needs at least one step and every step completed or
    errored; a skipped or waiting step keeps the routine idle.
    """
    statuses = [step.status for step in steps]
    if StepStatus.RUNNING in statuses:
        return RoutineStatus.RUNNING
    if StepStatus.ERROR in statuses:
        return RoutineStatus.ERROR
    if statuses and all(s in _FINISHED for s in statuses):
        return RoutineStatus.COMPLETED
    return RoutineStatus.IDLE


def _with_steps(
    execution: ConversionRoutineExecution,
    steps: list,
    **changes,
) -> ConversionRoutineExecution:
    return replace(
        execution,
        steps=steps,
        status=compute_routine_status(steps),
        last_updated=datetime.now(),
        **changes,
    )


def _find_index(execution: ConversionRoutineExecution, step_id: str) -> int:
    for i, step in enumerate(execution.steps):
        if step.id == step_id:
            return i
    raise StepNotFoundError(step_id)


def create_execution(
    name: str = DEFAULT_ROUTINE_NAME,
    provider: str = PROVIDER_HEURISTIC,
    owner_id: str = DEFAULT_OWNER_ID,
) -> ConversionRoutineExecution:
    """A new, empty, idle execution."""
    now = datetime.now()
    return ConversionRoutineExecution(
        id=generate_id("routine"),
        name=name,
        steps=[],
        current_step_index=0,
        status=RoutineStatus.IDLE,
        provider=provider,
        owner_id=owner_id,
        created_at=now,
        last_updated=now,
    )


def append_step(
    execution: ConversionRoutineExecution,
    text: str = "",
    task_description: str = "",
    example_output: Optional[str] = None,
    status: StepStatus = StepStatus.PENDING,
) -> ConversionRoutineExecution:
    """Add a step at the end; it becomes the current step."""
    step = WorkflowStep(
        id=generate_id("step"),
        step_number=len(execution.steps) + 1,
        status=status,
        input=StepInput(
            text=text,
            task_description=task_description,
            example_output=example_output,
        ),
    )
    return _with_steps(
        execution,
        [*execution.steps, step],
        current_step_index=len(execution.steps),
    )


def update_step_status(
    execution: ConversionRoutineExecution,
    step_id: str,
    status: StepStatus,
    output: Optional[StepOutput] = None,
    error: Optional[str] = None,
    duration_ms: Optional[int] = None,
) -> ConversionRoutineExecution:
    """
    Move one step to a new status.

    Raises:
        StepNotFoundError: No step with that id
        StepTransitionError: The step is terminal or editing, or the
            transition is not allowed
    """
    index = _find_index(execution, step_id)
    step = execution.steps[index]

    if step.status.is_terminal:
        raise StepTransitionError(
            f"Step {step.step_number} is {step.status.value} and cannot change"
        )
    if step.status == StepStatus.EDITING:
        raise StepTransitionError(
            f"Step {step.step_number} is being edited; submit it to run"
        )
    if status not in ALLOWED_TRANSITIONS.get(step.status, frozenset()):
        raise StepTransitionError(
            f"Step {step.step_number} cannot move from {step.status.value} to {status.value}"
        )

    steps = list(execution.steps)
    steps[index] = replace(
        step,
        status=status,
        output=output if output is not None else step.output,
        error=error,
        duration_ms=duration_ms if duration_ms is not None else step.duration_ms,
    )
    return _with_steps(execution, steps)


def carry_forward(
    execution: ConversionRoutineExecution,
    from_step_id: str,
) -> ConversionRoutineExecution:
    """
    Start a new editing step from a step's converted text.

    Raises:
        StepNotFoundError: No step with that id
        StepTransitionError: The source step has no output yet
    """
    source = execution.steps[_find_index(execution, from_step_id)]
    if source.output is None:
        raise StepTransitionError(
            f"Step {source.step_number} has no output to carry forward"
        )
    return append_step(
        execution,
        text=source.output.result.converted_text,
        status=StepStatus.EDITING,
    )


def submit_step(
    execution: ConversionRoutineExecution,
    step_id: str,
    task_description: str,
    example_output: Optional[str] = None,
    text: Optional[str] = None,
) -> ConversionRoutineExecution:
    """
    Give an editing or pending step its task and mark it running.

    ``text`` replaces the step's text when given.

    Raises:
        StepNotFoundError: No step with that id
        StepTransitionError: The step is neither editing nor pending
    """
    index = _find_index(execution, step_id)
    step = execution.steps[index]
    if step.status not in (StepStatus.EDITING, StepStatus.PENDING):
        raise StepTransitionError(
            f"Step {step.step_number} is {step.status.value} and cannot be submitted"
        )

    steps = list(execution.steps)
    steps[index] = replace(
        step,
        status=StepStatus.RUNNING,
        input=StepInput(
            text=step.input.text if text is None else text,
            task_description=task_description,
            example_output=example_output,
        ),
        error=None,
    )
    return _with_steps(execution, steps, current_step_index=index)


def replay_template(
    template: RoutineTemplate,
    provider: str = PROVIDER_HEURISTIC,
    owner_id: str = DEFAULT_OWNER_ID,
) -> ConversionRoutineExecution:
    """Fresh execution with one pending, text-free step per template step."""
    execution = replace(
        create_execution(template.name, provider, owner_id),
        saved_routine_id=template.id,
    )
    for step in sorted(template.steps, key=lambda s: s.step_number):
        execution = append_step(
            execution,
            text="",
            task_description=step.task_description,
            example_output=step.example_output,
        )
    return replace(execution, current_step_index=0)


def template_from_execution(
    execution: ConversionRoutineExecution,
    name: str,
    description: str = "",
) -> RoutineTemplate:
    """Capture the tasks of an execution as a reusable template."""
    steps = [s for s in execution.steps if s.input.task_description]
    return RoutineTemplate(
        id=generate_id("template"),
        name=name,
        description=description,
        steps=[
            StepTemplate(
                id=generate_id("tstep"),
                step_number=i,
                task_description=s.input.task_description,
                example_output=s.input.example_output,
            )
            for i, s in enumerate(steps, start=1)
        ],
        owner_id=execution.owner_id,
    )
