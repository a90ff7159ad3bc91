"""
PropCare BaseWorker - Shared behaviour of every specialised worker

A worker is a system prompt plus a tool set. One execute() call:

1. renders the system prompt with the per-turn context
2. builds the message list (system, recent history, new message)
3. runs the tool calling loop against the reasoning backend
4. turns the recorded tool calls into control signals:
   handoff_to_worker -> next_worker, update_issue_state -> state_updates

Example:
    class TriageWorker(BaseWorker):
        name = WorkerType.TRIAGE
        system_prompt = "You are a property maintenance triage specialist..."
        chat_options = ChatOptions(temperature=0.3, max_tokens=512)
        domain_tools = [...]
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..constants import (
    DEFAULT_MAX_TOOL_ITERATIONS, HANDOFF_TOOL_NAME, PROMPT_HISTORY_WINDOW,
    UPDATE_STATE_TOOL_NAME, MessageDirection, WorkerType,
)
from ..llm.base import BaseLLMClient, ChatOptions
from ..models import ToolInvocation, WorkerContext, WorkerResult
from ..tools.executor import run_conversation_turn
from ..tools.models import ToolDefinition
from ..tools.registry import ToolRegistry
from .common import COMMON_TOOLS

logger = logging.getLogger(__name__)

# update_issue_state argument -> Issue attribute
STATE_FIELD_MAP: Dict[str, str] = {
    "status": "status",
    "urgency": "urgency",
    "issueCategory": "issue_category",
    "issueDescription": "issue_description",
    "tenantAvailability": "tenant_availability",
    "accessInstructions": "access_instructions",
}


def map_state_updates(args: Dict[str, Any]) -> Dict[str, Any]:
    """Translate update_issue_state arguments to Issue attribute names."""
    return {STATE_FIELD_MAP.get(key, key): value for key, value in args.items()}


class BaseWorker:
    """
    Base class for workers.

    Subclasses set ``name``, ``system_prompt`` and ``domain_tools`` and may
    override ``chat_options`` and ``max_iterations``.
    """

    name: WorkerType
    system_prompt: str = ""
    domain_tools: List[ToolDefinition] = []
    chat_options: ChatOptions = ChatOptions(temperature=0.7, max_tokens=1024)
    max_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS
    include_reference_ids: bool = False

    def __init__(self, llm_client: BaseLLMClient):
        self.llm_client = llm_client
        self.registry = ToolRegistry([*self.domain_tools, *COMMON_TOOLS])

    @property
    def tools(self) -> List[ToolDefinition]:
        return self.registry.get_tools()

    # ===== Prompt assembly =====

    def build_system_prompt(self, context: WorkerContext) -> str:
        prompt = self.system_prompt

        if context.tenant:
            prompt += (
                "\n\n## Current Context"
                f"\n- Tenant: {context.tenant.name}"
                f"\n- Phone: {context.tenant.phone}"
            )

        if context.property:
            prompt += (
                f"\n- Property: {context.property.address}"
                f"\n- Postcode: {context.property.postcode}"
            )

        if context.landlord:
            prompt += f"\n- Landlord: {context.landlord.customer_name}"

        issue = context.current_issue
        if issue:
            prompt += (
                "\n\n## Current Issue"
                f"\n- Description: {issue.issue_description or 'Not yet provided'}"
                f"\n- Status: {issue.status}"
                f"\n- Category: {issue.issue_category or 'Not categorized'}"
                f"\n- Urgency: {issue.urgency or 'Not assessed'}"
            )

        if self.include_reference_ids:
            prompt += self._reference_ids(context)

        return prompt

    def _reference_ids(self, context: WorkerContext) -> str:
        """IDs the model must pass back to tools."""
        lines = []
        if context.landlord:
            lines.append(f"- Landlord ID: {context.landlord.id}")
        if context.property:
            lines.append(f"- Property ID: {context.property.id}")
        if context.current_issue:
            lines.append(f"- Issue ID: {context.current_issue.id}")
        if not lines:
            return ""
        return "\n\n## Reference IDs\n" + "\n".join(lines)

    def build_messages(self, message: str, context: WorkerContext) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": self.build_system_prompt(context)}
        ]

        for entry in context.conversation_history[-PROMPT_HISTORY_WINDOW:]:
            role = "user" if entry.direction == MessageDirection.INBOUND.value else "assistant"
            content = entry.content or f"[{entry.type} received]"
            messages.append({"role": role, "content": content})

        messages.append({"role": "user", "content": message})
        return messages

    # ===== Execution =====

    async def execute(
        self,
        message: str,
        context: WorkerContext,
        extra_tools: Optional[Iterable[ToolDefinition]] = None,
    ) -> WorkerResult:
        """
        Run one turn of this worker.

        Args:
            message: The inbound text (or a placeholder for media)
            context: Per-turn context assembled by the orchestrator
            extra_tools: Tools available for this call only

        Returns:
            WorkerResult with the reply, any handoff target and state updates
        """
        registry = self.registry.merged(extra_tools) if extra_tools else self.registry

        turn = await run_conversation_turn(
            self.llm_client,
            self.build_messages(message, context),
            registry,
            context=context,
            options=self.chat_options,
            max_iterations=self.max_iterations,
        )

        next_worker, state_updates = self.parse_tool_results(turn.tool_results)

        logger.debug(
            f"{self.name.value} finished in {turn.iterations} iteration(s), "
            f"{len(turn.tool_results)} tool call(s)"
        )

        return WorkerResult(
            message=turn.response,
            next_worker=next_worker,
            state_updates=state_updates,
            tool_calls=turn.tool_results,
        )

    def parse_tool_results(
        self, tool_results: List[ToolInvocation]
    ) -> Tuple[Optional[WorkerType], Optional[Dict[str, Any]]]:
        """
        Extract the handoff target (last call wins) and merged state updates.

        Calls the executor rejected carry no signal.
        """
        next_worker: Optional[WorkerType] = None
        state_updates: Optional[Dict[str, Any]] = None

        for invocation in tool_results:
            if invocation.is_error:
                continue
            if invocation.tool == HANDOFF_TOOL_NAME:
                target = invocation.args.get("worker")
                try:
                    next_worker = WorkerType(target)
                except ValueError:
                    logger.error(f"{self.name.value} requested handoff to unknown worker: {target}")
            elif invocation.tool == UPDATE_STATE_TOOL_NAME:
                state_updates = {**(state_updates or {}), **map_state_updates(invocation.args)}

        return next_worker, state_updates

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name.value} tools={len(self.registry)}>"
