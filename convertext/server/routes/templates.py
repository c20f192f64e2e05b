"""Routine template routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException

from ..app import require_app
from ..models import TemplateCreateRequest, TemplateReplayRequest

router = APIRouter()


@router.get("/api/templates")
async def list_templates(owner_id: str = "default"):
    app = require_app()
    return [t.to_dict() for t in await app.list_templates(owner_id)]


@router.post("/api/templates")
async def save_template(req: TemplateCreateRequest):
    """Save the tasks of a routine execution as a template."""
    app = require_app()
    template = await app.save_template(req.execution_id, req.name, req.description)
    return template.to_dict()


@router.delete("/api/templates/{template_id}")
async def delete_template(template_id: str, owner_id: str = "default"):
    app = require_app()
    if not await app.delete_template(template_id, owner_id):
        raise HTTPException(404, "Template not found")
    return {"deleted": True}


@router.post("/api/templates/{template_id}/replay")
async def replay_template(template_id: str, req: Optional[TemplateReplayRequest] = None):
    """Start a new routine execution from a template."""
    app = require_app()
    execution = await app.replay_template(template_id, req.owner_id if req else "default")
    return execution.to_dict()
