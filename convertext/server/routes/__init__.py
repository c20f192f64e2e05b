"""Route registration for the ConverText API."""

from fastapi import FastAPI

from .convert import router as convert_router
from .routines import router as routines_router
from .templates import router as templates_router
from .tools import router as tools_router


def register_routes(app: FastAPI):
    app.include_router(tools_router)
    app.include_router(convert_router)
    app.include_router(routines_router)
    app.include_router(templates_router)
