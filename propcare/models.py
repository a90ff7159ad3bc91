"""
PropCare Models - Shared dataclasses used across the package

Records mirror the rows the persistence layer reads and writes. The
per-turn WorkerContext and the WorkerResult contract live here too so that
tools, workers and the orchestrator can import them without cycles.
"""

from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .constants import IssueStatus, SenderType, WorkerType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _from_row(cls, row: Dict[str, Any]):
    """Build a dataclass from a dict, ignoring unknown columns."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in row.items() if k in names})


# ===== Directory records (read-only for this subsystem) =====


@dataclass
class Lead:
    """A landlord or property manager account."""
    id: str
    customer_name: str
    phone: str
    segment: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Lead":
        return _from_row(cls, row)


@dataclass
class Property:
    id: str
    landlord_lead_id: str
    address: str
    postcode: str = ""
    nickname: Optional[str] = None
    landlord: Optional[Lead] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Property":
        return _from_row(cls, row)


@dataclass
class Tenant:
    id: str
    name: str
    phone: str
    property_id: str
    property: Optional[Property] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Tenant":
        return _from_row(cls, row)


@dataclass
class ServiceItem:
    """Catalog entry for a productized service (SKU)."""
    id: str
    sku_code: str
    name: str
    description: str
    price_pence: int
    keywords: List[str] = field(default_factory=list)
    category: Optional[str] = None
    time_estimate_minutes: int = 60
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ServiceItem":
        return _from_row(cls, row)


# ===== Mutable records =====


@dataclass
class LandlordSettings:
    """
    Per-landlord auto-approval configuration.

    Amounts are in pence. Mutated only through the landlord settings tool
    and the budget spend tool.
    """
    landlord_lead_id: str
    auto_approve_under_pence: Optional[int] = 15000
    require_approval_above_pence: Optional[int] = 50000
    auto_approve_categories: List[str] = field(
        default_factory=lambda: ["plumbing_emergency", "heating", "security", "water_leak"]
    )
    always_require_approval_categories: List[str] = field(
        default_factory=lambda: ["cosmetic", "upgrade"]
    )
    emergency_auto_dispatch: bool = True
    emergency_contact_phone: Optional[str] = None
    monthly_budget_pence: Optional[int] = None
    budget_alert_threshold: int = 80
    current_month_spend_pence: int = 0
    budget_reset_day: int = 1
    notify_on_auto_approve: bool = True
    notify_on_completion: bool = True
    notify_on_new_issue: bool = True
    preferred_channel: str = "whatsapp"
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LandlordSettings":
        return _from_row(cls, row)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Issue:
    """
    A tracked maintenance problem.

    Created in ``new`` state and only ever transitioned, never deleted.
    """
    id: str
    tenant_id: str
    property_id: str
    landlord_lead_id: str
    conversation_id: str
    status: str = IssueStatus.NEW.value
    issue_description: Optional[str] = None
    issue_category: Optional[str] = None
    urgency: Optional[str] = None
    ai_resolution_attempted: bool = False
    photos: Optional[List[str]] = None
    voice_notes: Optional[List[str]] = None
    tenant_availability: Optional[str] = None
    access_instructions: Optional[str] = None
    additional_notes: Optional[str] = None
    dispatch_decision: Optional[str] = None
    dispatch_reason: Optional[str] = None
    price_estimate_low_pence: Optional[int] = None
    price_estimate_high_pence: Optional[int] = None
    price_estimate_mid_pence: Optional[int] = None
    price_estimate_confidence: Optional[int] = None
    quote_id: Optional[str] = None
    job_id: Optional[str] = None
    landlord_notified_at: Optional[datetime] = None
    landlord_approved_at: Optional[datetime] = None
    landlord_rejected_at: Optional[datetime] = None
    landlord_rejection_reason: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    resolved_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status not in IssueStatus.terminal_states()

    @property
    def has_triage_details(self) -> bool:
        """Description, photos and availability are all present."""
        return bool(self.issue_description and self.photos and self.tenant_availability)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Issue":
        return _from_row(cls, row)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Conversation:
    id: str
    phone_number: str
    status: str = "active"
    last_message_at: Optional[datetime] = None
    last_message_preview: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Conversation":
        return _from_row(cls, row)


@dataclass
class Message:
    """One append-only conversation entry."""
    id: str
    conversation_id: str
    direction: str
    content: Optional[str] = None
    type: str = "text"
    media_url: Optional[str] = None
    status: str = "sent"
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Message":
        return _from_row(cls, row)


# ===== Rule evaluation values =====


@dataclass
class PriceEstimate:
    low_price_pence: int
    high_price_pence: int
    mid_price_pence: int
    confidence: int
    matched_skus: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "lowPricePence": self.low_price_pence,
            "highPricePence": self.high_price_pence,
            "midPricePence": self.mid_price_pence,
            "confidence": self.confidence,
        }
        if self.matched_skus:
            data["matchedSkus"] = list(self.matched_skus)
        return data


@dataclass
class DispatchDecision:
    action: str
    reason: str
    notify_landlord: bool = True
    urgency_override: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "reason": self.reason,
            "notifyLandlord": self.notify_landlord,
            "urgencyOverride": self.urgency_override,
        }


# ===== Per-turn context and worker output =====


@dataclass
class WorkerContext:
    """
    Per-turn read model handed to workers and tool executors.

    Assembled fresh by the orchestrator for every inbound message and never
    persisted. The service handles give tool executors access to storage,
    outbound notifications and the troubleshooting session service.
    """
    conversation_id: str
    sender_id: str
    sender_type: SenderType
    tenant: Optional[Tenant] = None
    property: Optional[Property] = None
    landlord: Optional[Lead] = None
    landlord_settings: Optional[LandlordSettings] = None
    current_issue: Optional[Issue] = None
    conversation_history: List[Message] = field(default_factory=list)

    store: Any = None  # MaintenanceStore
    notifier: Any = None  # BaseNotifier
    troubleshooting: Any = None  # TroubleshootingService
    admin_phone: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolInvocation:
    """One executed tool call as recorded in a worker's log."""
    tool: str
    args: Dict[str, Any]
    result: Any
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"tool": self.tool, "args": self.args, "result": self.result, "isError": self.is_error}


@dataclass
class WorkerResult:
    """
    Output contract of every worker invocation.

    Only its effects (state update, message log) are persisted.
    """
    message: str
    next_worker: Optional[WorkerType] = None
    state_updates: Optional[Dict[str, Any]] = None
    tool_calls: List[ToolInvocation] = field(default_factory=list)

    @property
    def should_handoff(self) -> bool:
        return self.next_worker is not None


# ===== Boundary contracts =====


@dataclass
class IncomingMessage:
    """Inbound message as delivered by the transport layer."""
    from_: str
    type: str = "text"
    content: Optional[str] = None
    media_url: Optional[str] = None
    conversation_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrchestratorResponse:
    message: str
    worker_used: WorkerType
    issue_id: Optional[str] = None
    state_updates: Optional[Dict[str, Any]] = None
    tools_executed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "issueId": self.issue_id,
            "stateUpdates": self.state_updates,
            "workerUsed": self.worker_used.value,
            "toolsExecuted": list(self.tools_executed),
        }
