"""
PropCare Application - Single entry point wiring config to the orchestrator.

Usage:
    from propcare import PropCareApp

    app = PropCareApp("config.yaml")
    await app.initialize()

    response = await app.handle_message(IncomingMessage(from_="+447700900123", content="My boiler is broken"))
    print(response.message)

    await app.shutdown()
"""

import logging
from typing import Any, Optional, Union

from .config import PropCareConfig, load_config
from .db import Database, ensure_schema
from .llm import LLMConfig, create_llm_client
from .models import IncomingMessage, OrchestratorResponse
from .notifications import create_notifier
from .orchestrator import Orchestrator, OrchestratorSettings
from .storage import InMemoryStore, PostgresStore
from .workers import build_default_workers

logger = logging.getLogger(__name__)


class PropCareApp:
    """
    PropCare application.

    The constructor only reads configuration; clients, the database pool
    and the orchestrator are created by initialize().

    Args:
        config: Path to a YAML config file, or an already-loaded PropCareConfig
        troubleshooting: Optional TroubleshootingService for guided DIY flows
    """

    def __init__(
        self,
        config: Union[str, PropCareConfig, None] = None,
        troubleshooting: Any = None,
    ):
        if isinstance(config, PropCareConfig):
            self.config = config
        else:
            self.config = load_config(config)
        self.troubleshooting = troubleshooting

        self._initialized = False
        self._llm_client = None
        self._database: Optional[Database] = None
        self._store = None
        self._notifier = None
        self._orchestrator: Optional[Orchestrator] = None

    async def initialize(self) -> None:
        """Create the LLM client, store, notifier and orchestrator (runs once)."""
        if self._initialized:
            return

        cfg = self.config

        # 1. LLM client
        llm_config = LLMConfig(
            model=cfg.llm.model,
            api_key=cfg.llm.api_key,
            base_url=cfg.llm.base_url,
            timeout=cfg.llm.timeout,
        )
        self._llm_client = create_llm_client(cfg.llm.provider, llm_config)
        logger.info(f"LLM client: provider={cfg.llm.provider}, model={cfg.llm.model}")

        # 2. Store
        if cfg.database:
            self._database = Database(dsn=cfg.database)
            await self._database.initialize()
            await ensure_schema(self._database)
            self._store = PostgresStore(self._database)
        else:
            logger.warning("No database configured, using in-memory store")
            self._store = InMemoryStore()

        # 3. Notifier
        self._notifier = create_notifier(cfg.notifications.provider, **cfg.notifications.options)
        if self._notifier is None:
            logger.info("Outbound notifications disabled")

        # 4. Workers + orchestrator
        workers = build_default_workers(self._llm_client)
        for worker in workers.values():
            worker.max_iterations = cfg.orchestrator.max_tool_iterations

        self._orchestrator = Orchestrator(
            llm_client=self._llm_client,
            store=self._store,
            workers=workers,
            notifier=self._notifier,
            troubleshooting=self.troubleshooting,
            settings=OrchestratorSettings(
                country_code=cfg.orchestrator.country_code,
                history_limit=cfg.orchestrator.history_limit,
                max_handoff_depth=cfg.orchestrator.max_handoff_depth,
                admin_phone=cfg.notifications.admin_phone,
            ),
        )

        self._initialized = True
        logger.info("PropCare initialized")

    @property
    def orchestrator(self) -> Orchestrator:
        if self._orchestrator is None:
            raise RuntimeError("PropCareApp not initialized. Call await app.initialize() first.")
        return self._orchestrator

    @property
    def store(self):
        return self._store

    async def handle_message(self, incoming: IncomingMessage) -> OrchestratorResponse:
        await self.initialize()
        return await self.orchestrator.route(incoming)

    async def shutdown(self) -> None:
        """Release the LLM client and database pool."""
        if self._llm_client is not None:
            await self._llm_client.close()
        if self._database is not None:
            await self._database.close()
        self._initialized = False
        self._orchestrator = None
        logger.info("PropCare shut down")
