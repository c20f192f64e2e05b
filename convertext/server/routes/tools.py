"""Health and tool catalog routes."""

from fastapi import APIRouter

from ..app import require_app

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/api/tool-signatures")
async def tool_signatures():
    """Tool name -> ordered parameter names."""
    app = require_app()
    return await app.list_tool_signatures()


@router.get("/api/tools")
async def list_tools():
    """Full catalog with descriptions and render modes."""
    app = require_app()
    return [sig.to_dict() for sig in await app.list_tools()]
