"""
TenantWorker - First point of contact for tenants reporting problems.

Tries guided troubleshooting before arranging a callout, keeps the tenant
safe, and gathers what triage needs (description, photos or video,
availability, access).
"""

from ...constants import WorkerType
from ...llm.base import ChatOptions
from ...tools.models import ToolDefinition
from ..base import BaseWorker
from .tools import (
    start_troubleshooting,
    continue_troubleshooting,
    get_diy_advice,
    assess_issue,
    request_photos,
    request_availability,
    mark_resolved_diy,
    ready_for_triage,
)

TENANT_SYSTEM_PROMPT = """\
You are a friendly property maintenance assistant helping tenants with home issues.
Your job is to help them either fix things themselves (DIY) or arrange for a professional handyman.

## Troubleshooting first

When a tenant reports an issue, try guided troubleshooting before arranging a callout:
1. Understand what is wrong
2. Call start_troubleshooting straight away, even if the issue sounds complex
3. Pass every reply to continue_troubleshooting while a session is active
4. If DIY works, call mark_resolved_diy; if not, gather details for a professional visit

## Your 3 goals (handle them together)

### 1. Reassure
- "Don't worry, we'll get this sorted"
- "You're doing the right thing reporting this"

### 2. Keep them safe
- Gas smell: open windows, don't use switches, leave if the smell is strong
- Water leak: turn off the stopcock if they can find it
- Electrical issues: don't touch it, we'll send someone
- No heating in winter: we'll prioritise this

### 3. Gather information
- What exactly is the issue, and where in the property?
- When did it start, and is it getting worse?
- Always ask for a short video (10-15 seconds) or photos
- Access instructions (key location, alarm code, pets)
- When they are available for a visit

Once you have a description, photos and availability, call update_issue_state
with status "awaiting_details" and the details, then ready_for_triage.

## Never suggest DIY for
- Anything involving gas
- Electrical work beyond flipping breakers
- Working at height
- Structural issues
- Anything that smells dangerous or feels unsafe

## Communication style
- Keep messages short (2-3 sentences)
- Friendly, simple language, no jargon
- Ask one question at a time
- Use get_diy_advice for DIY suggestions
"""


class TenantWorker(BaseWorker):
    """Helps tenants troubleshoot and report maintenance issues."""

    name = WorkerType.TENANT
    system_prompt = TENANT_SYSTEM_PROMPT
    chat_options = ChatOptions(temperature=0.7, max_tokens=512)

    domain_tools = [
        ToolDefinition(
            name="start_troubleshooting",
            description=(
                "Start a guided troubleshooting flow for the reported issue. Use this when a "
                "tenant first reports a maintenance issue to guide them through DIY resolution steps."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "issueCategory": {
                        "type": "string",
                        "description": "Category of issue (e.g. plumbing, heating, electrical, doors_windows)",
                    },
                    "issueDescription": {
                        "type": "string",
                        "description": "Brief description of the issue from the tenant",
                    },
                },
                "required": ["issueCategory", "issueDescription"],
            },
            executor=start_troubleshooting,
        ),
        ToolDefinition(
            name="continue_troubleshooting",
            description=(
                "Continue an active troubleshooting session with the tenant's response. Use this "
                "when the tenant answers a troubleshooting question."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "sessionId": {"type": "string", "description": "The troubleshooting session ID"},
                    "tenantResponse": {
                        "type": "string",
                        "description": "The tenant's response to the troubleshooting question",
                    },
                },
                "required": ["sessionId", "tenantResponse"],
            },
            executor=continue_troubleshooting,
        ),
        ToolDefinition(
            name="get_diy_advice",
            description="Get safe DIY suggestions for common household issues",
            parameters={
                "type": "object",
                "properties": {
                    "issueType": {"type": "string", "description": "Type of issue (e.g. plumbing, door, heating)"},
                    "description": {"type": "string", "description": "Detailed description of the problem"},
                },
                "required": ["issueType", "description"],
            },
            executor=get_diy_advice,
        ),
        ToolDefinition(
            name="assess_issue",
            description="Assess the category and urgency of an issue based on its description",
            parameters={
                "type": "object",
                "properties": {
                    "description": {"type": "string", "description": "Description of the issue"},
                },
                "required": ["description"],
            },
            executor=assess_issue,
        ),
        ToolDefinition(
            name="request_photos",
            description="Request photos or video from the tenant",
            parameters={
                "type": "object",
                "properties": {
                    "reason": {"type": "string", "description": "Why photos would help"},
                },
                "required": ["reason"],
            },
            executor=request_photos,
        ),
        ToolDefinition(
            name="request_availability",
            description="Ask the tenant when they are available for a visit",
            parameters={
                "type": "object",
                "properties": {
                    "urgency": {
                        "type": "string",
                        "enum": ["today", "tomorrow", "this_week", "flexible"],
                        "description": "How soon we need to visit",
                    },
                },
                "required": ["urgency"],
            },
            executor=request_availability,
        ),
        ToolDefinition(
            name="mark_resolved_diy",
            description="Mark the issue as resolved by the tenant's own fix",
            parameters={
                "type": "object",
                "properties": {
                    "resolution": {"type": "string", "description": "What fixed the issue"},
                },
                "required": ["resolution"],
            },
            executor=mark_resolved_diy,
        ),
        ToolDefinition(
            name="ready_for_triage",
            description="Issue details gathered, ready for the triage worker to categorize and price",
            parameters={
                "type": "object",
                "properties": {
                    "summary": {"type": "string", "description": "Summary of the issue"},
                    "hasPhotos": {"type": "boolean", "description": "Whether photos were provided"},
                    "hasAvailability": {"type": "boolean", "description": "Whether availability was provided"},
                },
                "required": ["summary"],
            },
            executor=ready_for_triage,
        ),
    ]
