"""
DispatchWorker - Applies landlord rules to a triaged issue and books the job
or asks the landlord for approval.
"""

from ...constants import WorkerType
from ...llm.base import ChatOptions
from ...tools.models import ToolDefinition
from ..base import BaseWorker
from ..common import URGENCY_VALUES
from .tools import (
    get_landlord_rules,
    evaluate_dispatch,
    check_availability,
    book_job,
    request_landlord_approval,
    notify_landlord,
    update_budget_spend,
)

DISPATCH_SYSTEM_PROMPT = """\
You are a property maintenance dispatch coordinator.
Your job is to make dispatch decisions based on landlord rules and book jobs when appropriate.

## Your goals
1. Check rules - look up the landlord's auto-approval settings
2. Decide - auto-dispatch, request approval, or escalate
3. Book - if auto-approved, check availability and book
4. Notify - send the appropriate notifications

## Decision flow
Always call evaluate_dispatch with the triage estimate and follow its decision.
- auto_dispatch: check_availability, book_job, update_budget_spend, then set the
  issue status to "scheduled" with update_issue_state
- request_approval: request_landlord_approval, then set the status to "quoted"
- escalate_admin: escalate_to_human

## Notification rules
- Auto-dispatch: notify the landlord if they opted in
- Request approval: always notify the landlord
- Emergency: always notify the landlord after dispatch

Tell the tenant clearly what happens next.
"""


class DispatchWorker(BaseWorker):
    """Decides auto-dispatch vs approval and books jobs."""

    name = WorkerType.DISPATCH
    system_prompt = DISPATCH_SYSTEM_PROMPT
    chat_options = ChatOptions(temperature=0.2, max_tokens=512)
    include_reference_ids = True

    domain_tools = [
        ToolDefinition(
            name="get_landlord_rules",
            description="Get landlord auto-approval rules and settings",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": {"type": "string", "description": "Landlord lead ID"},
                },
                "required": ["landlordId"],
            },
            executor=get_landlord_rules,
        ),
        ToolDefinition(
            name="evaluate_dispatch",
            description="Evaluate whether to auto-dispatch or request approval",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": {"type": "string", "description": "Landlord lead ID"},
                    "issueCategory": {"type": "string", "description": "Category of the issue"},
                    "urgency": {"type": "string", "enum": URGENCY_VALUES, "description": "Urgency level"},
                    "estimateLowPence": {"type": "number", "description": "Low price estimate in pence"},
                    "estimateHighPence": {"type": "number", "description": "High price estimate in pence"},
                    "estimateMidPence": {"type": "number", "description": "Mid price estimate in pence"},
                    "confidence": {"type": "number", "description": "Confidence in estimate (0-100)"},
                },
                "required": ["landlordId", "issueCategory", "urgency", "estimateMidPence"],
            },
            executor=evaluate_dispatch,
        ),
        ToolDefinition(
            name="check_availability",
            description="Check available time slots for a job",
            parameters={
                "type": "object",
                "properties": {
                    "postcode": {"type": "string", "description": "Property postcode"},
                    "preferredDays": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Preferred days from the tenant",
                    },
                    "urgency": {
                        "type": "string",
                        "enum": ["today", "tomorrow", "this_week", "next_week", "flexible"],
                        "description": "How soon the job is needed",
                    },
                },
                "required": ["postcode"],
            },
            executor=check_availability,
        ),
        ToolDefinition(
            name="book_job",
            description="Book a job slot for dispatch",
            parameters={
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "Date in YYYY-MM-DD format"},
                    "slot": {"type": "string", "description": "Time slot (e.g. 09:00-12:00)"},
                    "estimatePence": {"type": "number", "description": "Estimated price in pence"},
                    "isEmergency": {"type": "boolean", "description": "Whether this is an emergency booking"},
                },
                "required": ["date", "slot", "estimatePence"],
            },
            executor=book_job,
        ),
        ToolDefinition(
            name="request_landlord_approval",
            description="Send an approval request to the landlord",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": {"type": "string", "description": "Landlord lead ID"},
                    "issueId": {"type": "string", "description": "Tenant issue ID"},
                    "summary": {"type": "string", "description": "Brief summary of the issue"},
                    "estimateLow": {"type": "number", "description": "Low estimate in pounds"},
                    "estimateHigh": {"type": "number", "description": "High estimate in pounds"},
                    "reason": {"type": "string", "description": "Why approval is needed"},
                },
                "required": ["landlordId", "summary", "estimateLow", "estimateHigh", "reason"],
            },
            executor=request_landlord_approval,
        ),
        ToolDefinition(
            name="notify_landlord",
            description="Send a notification to the landlord (for auto-approved jobs)",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": {"type": "string", "description": "Landlord lead ID"},
                    "type": {
                        "type": "string",
                        "enum": ["auto_dispatched", "emergency_dispatched", "completed"],
                        "description": "Type of notification",
                    },
                    "message": {"type": "string", "description": "Notification message"},
                },
                "required": ["landlordId", "type", "message"],
            },
            executor=notify_landlord,
        ),
        ToolDefinition(
            name="update_budget_spend",
            description="Update the landlord's monthly spend after auto-approval",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": {"type": "string", "description": "Landlord lead ID"},
                    "amountPence": {"type": "number", "description": "Amount to add to spend"},
                },
                "required": ["landlordId", "amountPence"],
            },
            executor=update_budget_spend,
        ),
    ]
