"""
LandlordWorker - Handles messages from landlords: approvals, spending and
auto-approval settings.
"""

from ...constants import WorkerType
from ...llm.base import ChatOptions
from ...tools.models import ToolDefinition
from ..base import BaseWorker
from .tools import (
    get_pending_approvals,
    approve_issue,
    reject_issue,
    get_spending_summary,
    get_property_issues,
    update_settings,
    list_properties,
)

LANDLORD_SYSTEM_PROMPT = """\
You are a property maintenance coordinator helping landlords manage their properties.
You help with approval requests, settings configuration, and property issue tracking.

## Your goals
1. Process approvals - handle quick approval or rejection of jobs
2. Answer questions - about issues, spending and properties
3. Update settings - help configure auto-approval rules

## Quick commands
- "Approve" or "Yes": approve the pending request (use get_pending_approvals to find it)
- "Reject" or "No": reject the pending request and ask for a reason if none was given
- "How much have I spent?": show the spending summary
- "Change my threshold": update auto-approval settings

## Communication style
- Professional but friendly
- Concise, landlords are busy
- Show costs in pounds, not pence
- Give clear next steps
"""

_LANDLORD_ID = {"type": "string", "description": "Landlord lead ID"}


class LandlordWorker(BaseWorker):
    """Serves landlords over WhatsApp."""

    name = WorkerType.LANDLORD
    system_prompt = LANDLORD_SYSTEM_PROMPT
    chat_options = ChatOptions(temperature=0.5, max_tokens=512)
    include_reference_ids = True

    domain_tools = [
        ToolDefinition(
            name="get_pending_approvals",
            description="Get the list of issues awaiting landlord approval",
            parameters={
                "type": "object",
                "properties": {"landlordId": _LANDLORD_ID},
                "required": ["landlordId"],
            },
            executor=get_pending_approvals,
        ),
        ToolDefinition(
            name="approve_issue",
            description="Approve a pending issue for dispatch",
            parameters={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Issue ID to approve"},
                    "notes": {"type": "string", "description": "Optional notes from the landlord"},
                },
                "required": ["issueId"],
            },
            executor=approve_issue,
        ),
        ToolDefinition(
            name="reject_issue",
            description="Reject a pending issue",
            parameters={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Issue ID to reject"},
                    "reason": {"type": "string", "description": "Reason for rejection"},
                },
                "required": ["issueId", "reason"],
            },
            executor=reject_issue,
        ),
        ToolDefinition(
            name="get_spending_summary",
            description="Get the landlord's spending summary for the current month",
            parameters={
                "type": "object",
                "properties": {"landlordId": _LANDLORD_ID},
                "required": ["landlordId"],
            },
            executor=get_spending_summary,
        ),
        ToolDefinition(
            name="get_property_issues",
            description="Get issues for a specific property",
            parameters={
                "type": "object",
                "properties": {
                    "propertyId": {"type": "string", "description": "Property ID"},
                    "status": {
                        "type": "string",
                        "enum": ["all", "open", "completed"],
                        "description": "Filter by status",
                    },
                },
                "required": ["propertyId"],
            },
            executor=get_property_issues,
        ),
        ToolDefinition(
            name="update_settings",
            description="Update landlord auto-approval settings",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": _LANDLORD_ID,
                    "autoApproveUnderPounds": {"type": "number", "description": "Auto-approve threshold in pounds"},
                    "monthlyBudgetPounds": {"type": "number", "description": "Monthly budget in pounds"},
                    "notifyOnAutoApprove": {"type": "boolean", "description": "Whether to notify on auto-approvals"},
                },
                "required": ["landlordId"],
            },
            executor=update_settings,
        ),
        ToolDefinition(
            name="list_properties",
            description="List all properties for a landlord",
            parameters={
                "type": "object",
                "properties": {"landlordId": _LANDLORD_ID},
                "required": ["landlordId"],
            },
            executor=list_properties,
        ),
    ]
