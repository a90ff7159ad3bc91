"""
PropCare Protocols - Interfaces for collaborators implemented elsewhere

The troubleshooting flow engine is consumed as an opaque session service:
PropCare only starts sessions and forwards tenant replies.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@dataclass
class TroubleshootingResult:
    """
    One step of a guided troubleshooting session.

    Attributes:
        response: Text to relay to the tenant
        session_status: "active", "resolved" or "escalated"
        session_id: Session to pass to the next process_response() call
        outcome: Final outcome once the session ends (e.g. "resolved_diy")
        next_step_id: Step the flow is waiting on
        data_to_collect: Fields the flow still wants from the tenant
    """
    response: str
    session_status: str
    session_id: Optional[str] = None
    outcome: Optional[str] = None
    next_step_id: Optional[str] = None
    data_to_collect: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "sessionStatus": self.session_status,
            "response": self.response,
            "outcome": self.outcome,
            "nextStepId": self.next_step_id,
            "dataToCollect": self.data_to_collect,
        }


@runtime_checkable
class TroubleshootingService(Protocol):
    """
    Guided DIY troubleshooting sessions.

    Example:
        class FlowEngine:
            def select_flow(self, category, description):
                return "dripping_tap" if "tap" in description else None

            async def start_session(self, issue_id, flow_id, initial_message):
                ...

            async def process_response(self, session_id, message):
                ...
    """

    def select_flow(self, category: str, description: str) -> Optional[str]:
        """Flow id best matching the issue, or None if no flow applies"""
        ...

    async def start_session(
        self,
        issue_id: str,
        flow_id: str,
        initial_message: str,
    ) -> TroubleshootingResult:
        """Start a session for an issue and return the first step"""
        ...

    async def process_response(self, session_id: str, message: str) -> TroubleshootingResult:
        """Feed a tenant reply into an active session"""
        ...
