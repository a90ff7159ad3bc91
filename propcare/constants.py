"""
Shared constants for PropCare.

Centralizes worker names, issue lifecycle values and fixed user-facing
strings that are needed by the workers, rules and orchestrator.
"""

from enum import Enum
from typing import FrozenSet, Tuple


class WorkerType(str, Enum):
    """Identifiers of the specialised workers."""
    TENANT = "TENANT_WORKER"
    TRIAGE = "TRIAGE_WORKER"
    DISPATCH = "DISPATCH_WORKER"
    LANDLORD = "LANDLORD_WORKER"
    INSPECTOR = "INSPECTOR_WORKER"  # declared, no implementation registered


class SenderType(str, Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"


class IssueStatus(str, Enum):
    """Issue lifecycle states"""
    NEW = "new"
    AI_HELPING = "ai_helping"
    AWAITING_DETAILS = "awaiting_details"
    REPORTED = "reported"
    QUOTED = "quoted"
    APPROVED = "approved"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    RESOLVED_DIY = "resolved_diy"
    CANCELLED = "cancelled"

    @classmethod
    def terminal_states(cls) -> FrozenSet[str]:
        """States after which an issue is immutable (audit timestamps aside)."""
        return frozenset({cls.COMPLETED.value, cls.RESOLVED_DIY.value, cls.CANCELLED.value})

    @classmethod
    def open_states(cls) -> Tuple[str, ...]:
        terminal = cls.terminal_states()
        return tuple(s.value for s in cls if s.value not in terminal)


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class DispatchAction(str, Enum):
    AUTO_DISPATCH = "auto_dispatch"
    REQUEST_APPROVAL = "request_approval"
    ESCALATE_ADMIN = "escalate_admin"


class MessageDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


ISSUE_CATEGORIES: Tuple[str, ...] = (
    "plumbing",
    "plumbing_emergency",
    "electrical",
    "electrical_emergency",
    "heating",
    "carpentry",
    "locksmith",
    "security",
    "water_leak",
    "appliance",
    "cosmetic",
    "upgrade",
    "pest_control",
    "cleaning",
    "garden",
    "general",
    "other",
)

# Lead segments that identify a landlord
LANDLORD_SEGMENTS: FrozenSet[str] = frozenset({"LANDLORD", "PROP_MGR"})

# ── Tool names that carry control signals ──

HANDOFF_TOOL_NAME = "handoff_to_worker"
UPDATE_STATE_TOOL_NAME = "update_issue_state"
ESCALATE_TOOL_NAME = "escalate_to_human"

# ── Limits ──

DEFAULT_MAX_TOOL_ITERATIONS = 5
DEFAULT_HISTORY_LIMIT = 20
PROMPT_HISTORY_WINDOW = 10
DEFAULT_MAX_HANDOFF_DEPTH = 3
DEFAULT_COUNTRY_CODE = "44"
PREVIEW_LENGTH = 100

# ── Fixed user-facing replies ──

MAX_ITERATIONS_FALLBACK = (
    "I apologize, but I encountered an issue processing your request. "
    "Please try again."
)

UNKNOWN_SENDER_REPLY = (
    "Hi! I don't have your number registered yet.\n\n"
    "Could you tell me your address or postcode so I can find your property?"
)

WORKER_UNAVAILABLE_REPLY = "Sorry, something went wrong. Please try again."
