"""
ConverText Application - Single entry point for text conversion and routines.

Usage:
    from convertext import ConverText

    app = ConverText("config.yaml")

    # One-off conversion
    result = await app.process_request("the quick brown fox", "Capitalize all words")

    # Multi-step routine
    execution = await app.create_routine(owner_id="alice")
    execution = await app.add_and_run_step(execution.id, "a,b\\n1,2", "csv to json")
"""

import asyncio
import logging
import os
import re
from typing import Any, Dict, List, Optional, Sequence

from .constants import (
    DEFAULT_MAX_EXECUTIONS,
    DEFAULT_OWNER_ID,
    DEFAULT_ROUTINE_NAME,
    DELEGATED_PROVIDERS,
    HEURISTIC_PROVIDERS,
    PROVIDER_HEURISTIC,
)
from .models import ConversionResult, ToolEvaluation
from .protocols import LLMClientProtocol
from .storage.base import RoutineStorage
from .tools.models import ToolSignature

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "evaluator": {"provider": PROVIDER_HEURISTIC},
    "routines": {"default_name": DEFAULT_ROUTINE_NAME},
}


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    return yaml.safe_load(resolved) or {}


class ConverText:
    """
    ConverText application entry point.

    Sync constructor reads and validates config; the evaluator, storage and
    routine manager are built on the first async call.

    Args:
        config: Path to a YAML configuration file, or an already loaded dict.
            Defaults apply when omitted.
        llm_client: Reasoning backend to use instead of building one from
            the ``llm`` section
        storage: Storage to use instead of the ``database`` setting

    Example:
        app = ConverText({"evaluator": {"provider": "heuristic"}})
        result = await app.process_request("name,age\\nAlice,28", "csv to json")
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        llm_client: Optional[LLMClientProtocol] = None,
        storage: Optional[RoutineStorage] = None,
    ):
        if config is None:
            self._config = dict(DEFAULT_CONFIG)
        elif isinstance(config, dict):
            self._config = dict(config)
        else:
            self._config = _load_config(config)

        provider = self.evaluator_provider
        if provider not in HEURISTIC_PROVIDERS + DELEGATED_PROVIDERS:
            raise ValueError(f"Unknown evaluator provider: '{provider}'")
        if provider in DELEGATED_PROVIDERS and llm_client is None:
            llm_cfg = self._config.get("llm") or {}
            if not llm_cfg.get("provider") or not llm_cfg.get("model"):
                raise ValueError("Missing required config fields: 'llm.provider' and 'llm.model'")

        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._llm_client = llm_client
        self._storage = storage
        self._owns_storage = storage is None
        self._database = None
        self._registry = None
        self._agent = None
        self._routines = None

    @property
    def config(self) -> dict:
        """Return a copy of the raw configuration dict."""
        return dict(self._config)

    @property
    def evaluator_provider(self) -> str:
        evaluator_cfg = self._config.get("evaluator") or {}
        return str(evaluator_cfg.get("provider") or PROVIDER_HEURISTIC).lower()

    async def _ensure_initialized(self) -> None:
        """Lazy initialization, runs once on the first async call."""
        if self._initialized:
            return

        async with self._init_lock:
            # Another caller may have finished while we waited
            if self._initialized:
                return
            await self._initialize()

    async def _initialize(self) -> None:
        from .agent import ConversionAgent
        from .evaluator.factory import create_evaluator
        from .llm.base import LLMConfig
        from .routine.manager import RoutineManager
        from .tools.registry import ToolRegistry

        cfg = self._config

        # 1. Tool catalog
        self._registry = ToolRegistry.get_instance()

        # 2. Evaluator
        provider = self.evaluator_provider
        llm_cfg = cfg.get("llm") or {}
        evaluator = create_evaluator(
            provider,
            registry=self._registry,
            llm_client=self._llm_client,
            llm_config=LLMConfig.from_dict(llm_cfg) if llm_cfg else None,
            llm_provider=llm_cfg.get("provider", "gemini"),
        )
        self._agent = ConversionAgent(evaluator, self._registry)
        logger.info(f"Evaluator: provider={provider}")

        # 3. Storage
        self._storage = await self._init_storage()

        # 4. Routines
        routines_cfg = cfg.get("routines") or {}
        self._routines = RoutineManager(
            self._agent,
            self._storage,
            default_name=routines_cfg.get("default_name", DEFAULT_ROUTINE_NAME),
            max_executions=int(routines_cfg.get("max_executions", DEFAULT_MAX_EXECUTIONS)),
        )

        self._initialized = True
        logger.info("ConverText initialized")

    async def _init_storage(self) -> RoutineStorage:
        """
        Build and initialize storage.

        A backend that cannot be reached is replaced by in-memory storage so
        conversions keep working; only persistence is lost.
        """
        from .storage.memory import MemoryStorage

        storage = self._storage
        try:
            if storage is None:
                dsn = self._config.get("database")
                if dsn:
                    from .db.database import Database
                    from .storage.postgres_storage import PostgreSQLStorage

                    self._database = Database(dsn=dsn)
                    await self._database.initialize()
                    storage = PostgreSQLStorage(db=self._database)
                else:
                    logger.info("No database configured, using in-memory storage")
                    storage = MemoryStorage()
            await storage.initialize()
            return storage
        except Exception as e:
            logger.warning(f"Storage initialization failed, using in-memory storage: {e}")
            if self._database is not None:
                try:
                    await self._database.close()
                except Exception as close_error:
                    logger.warning(f"Error closing database: {close_error}")
                self._database = None
            self._owns_storage = True
            fallback = MemoryStorage()
            await fallback.initialize()
            return fallback

    async def shutdown(self) -> None:
        """Close the database pool and drop lazily built components."""
        if not self._initialized:
            return
        try:
            if self._storage:
                await self._storage.close()
            if self._database:
                await self._database.close()
        except Exception as e:
            logger.warning(f"Error during shutdown: {e}")
        finally:
            self._initialized = False
            self._database = None
            if self._owns_storage:
                self._storage = None
            self._agent = None
            self._routines = None
            logger.info("ConverText shut down")

    @property
    def routines(self):
        """The RoutineManager; only available after initialization."""
        if self._routines is None:
            raise RuntimeError("ConverText not initialized")
        return self._routines

    # ── Conversion ──

    async def evaluate_task(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
    ) -> ToolEvaluation:
        await self._ensure_initialized()
        return await self._agent.evaluate_task(text, task_description, example_output)

    async def process_request(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
        tool_args: Optional[Sequence[str]] = None,
        owner_id: Optional[str] = None,
    ) -> ConversionResult:
        """
        Convert text in one shot.

        When ``owner_id`` is given the result is also added to that owner's
        history.
        """
        await self._ensure_initialized()
        result = await self._agent.process_request(
            text, task_description, example_output, tool_args
        )
        if owner_id:
            await self._routines.record_conversion(result, task_description, owner_id=owner_id)
        return result

    async def execute(self, tool_name: str, args: Sequence[str]) -> ConversionResult:
        await self._ensure_initialized()
        return await self._agent.execute(tool_name, args)

    async def list_tool_signatures(self) -> Dict[str, List[str]]:
        await self._ensure_initialized()
        return self._agent.list_tool_signatures()

    async def list_tools(self) -> List[ToolSignature]:
        await self._ensure_initialized()
        return self._registry.list_tools()

    async def list_history(self, owner_id: str = DEFAULT_OWNER_ID, limit: int = 50):
        await self._ensure_initialized()
        return await self._routines.list_history(owner_id, limit)

    # ── Routines ──

    async def create_routine(self, name: Optional[str] = None, owner_id: str = DEFAULT_OWNER_ID):
        await self._ensure_initialized()
        return await self._routines.create_execution(name, owner_id)

    async def get_routine(self, execution_id: str):
        await self._ensure_initialized()
        return self._routines.get_execution(execution_id)

    async def append_step(self, execution_id: str, **kwargs):
        await self._ensure_initialized()
        return await self._routines.append_step(execution_id, **kwargs)

    async def run_step(self, execution_id: str, step_id: str, tool_args=None):
        await self._ensure_initialized()
        return await self._routines.run_step(execution_id, step_id, tool_args)

    async def add_and_run_step(self, execution_id: str, text: str, task_description: str, **kwargs):
        await self._ensure_initialized()
        return await self._routines.add_and_run_step(execution_id, text, task_description, **kwargs)

    async def carry_forward(self, execution_id: str, from_step_id: str):
        await self._ensure_initialized()
        return await self._routines.carry_forward(execution_id, from_step_id)

    async def submit_step(self, execution_id: str, step_id: str, task_description: str, **kwargs):
        await self._ensure_initialized()
        return await self._routines.submit_step(execution_id, step_id, task_description, **kwargs)

    async def skip_step(self, execution_id: str, step_id: str):
        await self._ensure_initialized()
        return await self._routines.skip_step(execution_id, step_id)

    async def discard_routine(self, execution_id: str) -> bool:
        await self._ensure_initialized()
        return await self._routines.discard_execution(execution_id)

    # ── Templates ──

    async def save_template(self, execution_id: str, name: str, description: str = ""):
        await self._ensure_initialized()
        return await self._routines.save_template(execution_id, name, description)

    async def list_templates(self, owner_id: str = DEFAULT_OWNER_ID):
        await self._ensure_initialized()
        return await self._routines.list_templates(owner_id)

    async def delete_template(self, template_id: str, owner_id: str = DEFAULT_OWNER_ID) -> bool:
        await self._ensure_initialized()
        return await self._routines.delete_template(template_id, owner_id)

    async def replay_template(self, template_id: str, owner_id: str = DEFAULT_OWNER_ID):
        await self._ensure_initialized()
        return await self._routines.replay_template(template_id, owner_id)
