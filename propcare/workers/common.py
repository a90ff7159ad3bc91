"""
Common tools shared by every worker.

- handoff_to_worker: ask the orchestrator to pass the turn to another worker
- update_issue_state: record changes to the current issue
- escalate_to_human: flag the conversation for a person on the team

The first two carry control signals; their calls are interpreted by
BaseWorker after the turn, never by the executors themselves.
"""

import logging
from typing import Any, Dict

from ..constants import (
    ESCALATE_TOOL_NAME, HANDOFF_TOOL_NAME,
    UPDATE_STATE_TOOL_NAME, IssueStatus, Urgency, WorkerType,
)
from ..models import WorkerContext
from ..tools.models import ToolDefinition

logger = logging.getLogger(__name__)

HANDOFF_TARGETS = [w.value for w in WorkerType]

URGENCY_VALUES = [u.value for u in Urgency]


async def handoff_to_worker(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    logger.info(f"Handoff requested to {args['worker']}: {args.get('reason', '')}")
    return {"success": True, "handoff": args["worker"]}


async def update_issue_state(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    return {"success": True, "updates": args}


async def escalate_to_human(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    reason = args["reason"]
    urgency = args.get("urgency", Urgency.MEDIUM.value)
    logger.warning(f"Escalation for conversation {context.conversation_id} ({urgency}): {reason}")

    if context.admin_phone and context.notifier is not None:
        body = (
            f"Escalation ({urgency}) on conversation {context.conversation_id}\n"
            f"Reason: {reason}"
        )
        if context.current_issue:
            body += f"\nIssue: {context.current_issue.id}"
        await context.notifier.send_message(context.admin_phone, body)

    return {"escalated": True, "reason": reason}


COMMON_TOOLS = [
    ToolDefinition(
        name=HANDOFF_TOOL_NAME,
        description="Hand off the conversation to another specialised worker",
        parameters={
            "type": "object",
            "properties": {
                "worker": {
                    "type": "string",
                    "enum": HANDOFF_TARGETS,
                    "description": "The worker to hand off to",
                },
                "reason": {"type": "string", "description": "Why the handoff is needed"},
            },
            "required": ["worker", "reason"],
        },
        executor=handoff_to_worker,
    ),
    ToolDefinition(
        name=UPDATE_STATE_TOOL_NAME,
        description="Update the current issue state",
        parameters={
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": [s.value for s in IssueStatus],
                    "description": "New status for the issue",
                },
                "urgency": {"type": "string", "enum": URGENCY_VALUES, "description": "Urgency level"},
                "issueCategory": {"type": "string", "description": "Category of the issue"},
                "issueDescription": {"type": "string", "description": "Updated description"},
                "tenantAvailability": {"type": "string", "description": "When the tenant is available"},
                "accessInstructions": {"type": "string", "description": "How to access the property"},
            },
        },
        executor=update_issue_state,
    ),
    ToolDefinition(
        name=ESCALATE_TOOL_NAME,
        description="Escalate to a human admin when the situation needs human intervention",
        parameters={
            "type": "object",
            "properties": {
                "reason": {"type": "string", "description": "Why human review is needed"},
                "urgency": {"type": "string", "enum": URGENCY_VALUES},
            },
            "required": ["reason", "urgency"],
        },
        executor=escalate_to_human,
    ),
]
