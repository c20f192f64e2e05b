"""FastAPI app creation, CORS, and the global ConverText instance."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..app import ConverText
from ..errors import RoutineError, StepTransitionError

logger = logging.getLogger(__name__)

_config_path = os.getenv("CONVERTEXT_CONFIG", "config.yaml")

_app: Optional[ConverText] = None


def _try_load_app():
    """Load ConverText from the config file, or with defaults when it is missing."""
    global _app
    try:
        if os.path.exists(_config_path):
            _app = ConverText(_config_path)
            logger.info(f"ConverText loaded from {_config_path}")
        else:
            _app = ConverText()
            logger.warning(f"Config not found: {_config_path}. Using defaults.")
    except Exception as e:
        logger.warning(f"Failed to load config: {e}")
        _app = None


def require_app() -> ConverText:
    """Raise 503 if the app could not be configured. Lazy-loads on first call."""
    global _app
    if _app is None:
        _try_load_app()
    if _app is None:
        raise HTTPException(503, "Not configured. Check the ConverText config file.")
    return _app


def set_app(new_app: Optional[ConverText]):
    """Replace the global app instance (tests, embedding)."""
    global _app
    _app = new_app


def get_app_instance() -> Optional[ConverText]:
    return _app


async def _routine_error_handler(request: Request, exc: RoutineError) -> JSONResponse:
    """Unknown ids map to 404, disallowed transitions to 409."""
    status = 409 if isinstance(exc, StepTransitionError) else 404
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@asynccontextmanager
async def _lifespan(_api: FastAPI):
    yield
    if _app is not None:
        await _app.shutdown()


def _create_api() -> FastAPI:
    """Create and configure the FastAPI app with routes."""
    from .. import __version__

    _api = FastAPI(title="ConverText", version=__version__, lifespan=_lifespan)

    allowed_origins_str = os.getenv(
        "CONVERTEXT_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    )
    allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    _api.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _api.add_exception_handler(RoutineError, _routine_error_handler)

    from .routes import register_routes
    register_routes(_api)
    return _api


api = _create_api()
