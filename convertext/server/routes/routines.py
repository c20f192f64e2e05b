"""Routine execution routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException

from ..app import require_app
from ..models import (
    RoutineCreateRequest,
    StepCreateRequest,
    StepRunRequest,
    StepSubmitRequest,
)

router = APIRouter()


@router.post("/api/routines")
async def create_routine(req: RoutineCreateRequest):
    app = require_app()
    execution = await app.create_routine(req.name, req.owner_id)
    return execution.to_dict()


@router.get("/api/routines/{execution_id}")
async def get_routine(execution_id: str):
    app = require_app()
    execution = await app.get_routine(execution_id)
    return execution.to_dict()


@router.delete("/api/routines/{execution_id}")
async def discard_routine(execution_id: str):
    """Release a finished routine; its stored copy is kept."""
    app = require_app()
    if not await app.discard_routine(execution_id):
        raise HTTPException(404, "Routine not found")
    return {"discarded": True}


@router.post("/api/routines/{execution_id}/steps")
async def add_step(execution_id: str, req: StepCreateRequest):
    """Append a step; with ``run`` set it is evaluated and executed right away."""
    app = require_app()
    if req.run:
        execution = await app.add_and_run_step(
            execution_id,
            req.text,
            req.task_description,
            example_output=req.example_output,
            tool_args=req.tool_args,
        )
    else:
        execution = await app.append_step(
            execution_id,
            text=req.text,
            task_description=req.task_description,
            example_output=req.example_output,
        )
    return execution.to_dict()


@router.post("/api/routines/{execution_id}/steps/{step_id}/run")
async def run_step(execution_id: str, step_id: str, req: Optional[StepRunRequest] = None):
    app = require_app()
    execution = await app.run_step(execution_id, step_id, req.tool_args if req else None)
    return execution.to_dict()


@router.post("/api/routines/{execution_id}/steps/{step_id}/carry-forward")
async def carry_forward(execution_id: str, step_id: str):
    """Start a new editing step from this step's converted text."""
    app = require_app()
    execution = await app.carry_forward(execution_id, step_id)
    return execution.to_dict()


@router.post("/api/routines/{execution_id}/steps/{step_id}/submit")
async def submit_step(execution_id: str, step_id: str, req: StepSubmitRequest):
    app = require_app()
    execution = await app.submit_step(
        execution_id,
        step_id,
        req.task_description,
        example_output=req.example_output,
        text=req.text,
        tool_args=req.tool_args,
    )
    return execution.to_dict()


@router.post("/api/routines/{execution_id}/steps/{step_id}/skip")
async def skip_step(execution_id: str, step_id: str):
    app = require_app()
    execution = await app.skip_step(execution_id, step_id)
    return execution.to_dict()
