"""
PropCare - Conversational property maintenance over WhatsApp

Tenants report problems, get DIY help, and have jobs triaged, priced and
dispatched; landlords approve or reject work and manage auto-approval
rules. Each inbound message is routed to one of four language-model-backed
workers (Tenant, Triage, Dispatch, Landlord) that act through tools.

Quick Start:
    from propcare import PropCareApp, IncomingMessage

    app = PropCareApp("config.yaml")
    response = await app.handle_message(
        IncomingMessage(from_="+447700900123", content="My kitchen tap won't stop dripping")
    )
    print(response.message)

HTTP server:
    propcare-server --config config.yaml --port 8000
"""

from .app import PropCareApp
from .config import PropCareConfig, load_config
from .constants import IssueStatus, SenderType, Urgency, WorkerType
from .models import (
    Issue,
    IncomingMessage,
    OrchestratorResponse,
    WorkerContext,
    WorkerResult,
)
from .orchestrator import Orchestrator, OrchestratorSettings
from .protocols import TroubleshootingResult, TroubleshootingService

__version__ = "0.1.0"

__all__ = [
    "PropCareApp",
    "PropCareConfig",
    "load_config",
    "Orchestrator",
    "OrchestratorSettings",
    "IncomingMessage",
    "OrchestratorResponse",
    "Issue",
    "WorkerContext",
    "WorkerResult",
    "WorkerType",
    "SenderType",
    "IssueStatus",
    "Urgency",
    "TroubleshootingResult",
    "TroubleshootingService",
]
