"""One-shot evaluation, conversion and history routes."""

from fastapi import APIRouter

from ..app import require_app
from ..models import ConvertRequest, EvaluateRequest

router = APIRouter()


@router.post("/api/evaluate")
async def evaluate(req: EvaluateRequest):
    """Select a tool for a task without running it."""
    app = require_app()
    evaluation = await app.evaluate_task(req.text, req.task_description, req.example_output)
    return evaluation.to_dict()


@router.post("/api/convert")
async def convert(req: ConvertRequest):
    """Evaluate and run; the result is recorded in the owner's history."""
    app = require_app()
    result = await app.process_request(
        req.text,
        req.task_description,
        example_output=req.example_output,
        tool_args=req.tool_args,
        owner_id=req.owner_id,
    )
    return result.to_dict()


@router.get("/api/history")
async def history(owner_id: str = "default", limit: int = 50):
    app = require_app()
    records = await app.list_history(owner_id, limit)
    return [r.to_dict() for r in records]
