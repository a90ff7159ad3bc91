"""Orchestrator configuration and sender resolution types."""

from dataclasses import dataclass
from typing import Optional

from ..constants import (
    DEFAULT_COUNTRY_CODE, DEFAULT_HISTORY_LIMIT, DEFAULT_MAX_HANDOFF_DEPTH,
    SenderType,
)
from ..models import Lead, Property, Tenant


@dataclass
class OrchestratorSettings:
    """Tunable parameters for routing one inbound message."""

    country_code: str = DEFAULT_COUNTRY_CODE
    """Dialling code applied to numbers with a leading 0."""
    history_limit: int = DEFAULT_HISTORY_LIMIT
    """Messages loaded into the worker context, oldest first."""
    max_handoff_depth: int = DEFAULT_MAX_HANDOFF_DEPTH
    """Additional worker executions allowed after the first."""
    admin_phone: Optional[str] = None
    """Where escalations are sent, if anywhere."""


@dataclass
class SenderIdentity:
    """Who sent an inbound message."""

    type: SenderType
    tenant: Optional[Tenant] = None
    property: Optional[Property] = None
    landlord: Optional[Lead] = None

    def entity_id(self) -> str:
        if self.tenant is not None:
            return self.tenant.id
        if self.landlord is not None:
            return self.landlord.id
        return "unknown"

    def default_conversation_id(self) -> str:
        return f"{self.type.value}_{self.entity_id()}"
