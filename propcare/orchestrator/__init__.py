"""
PropCare Orchestrator Module

Routes inbound messages to the right worker, follows handoffs between
workers, and records state changes and the conversation log.

Quick Start:
    from propcare.orchestrator import Orchestrator, OrchestratorSettings

    orchestrator = Orchestrator(
        llm_client=llm_client,
        store=store,
        notifier=notifier,
        settings=OrchestratorSettings(country_code="44"),
    )
    response = await orchestrator.route(incoming)
"""

from .models import OrchestratorSettings, SenderIdentity
from .orchestrator import Orchestrator
from .routing import select_worker
from .sender import identify_sender, normalize_phone

__all__ = [
    "Orchestrator",
    "OrchestratorSettings",
    "SenderIdentity",
    "select_worker",
    "identify_sender",
    "normalize_phone",
]
