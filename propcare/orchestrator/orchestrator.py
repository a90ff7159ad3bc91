"""
PropCare Orchestrator - Routes inbound WhatsApp messages to workers

One route() call:
1. identifies the sender (tenant first, then landlord)
2. assembles the per-turn WorkerContext (history, current issue, settings)
3. selects the entry worker and executes it
4. follows handoffs with the same message and context, up to a cap
5. applies accumulated state updates to the current issue
6. records the exchange in the conversation log

Storage failures while updating the issue or saving the conversation are
logged; the reply is still returned.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..constants import (
    PREVIEW_LENGTH, UNKNOWN_SENDER_REPLY, WORKER_UNAVAILABLE_REPLY,
    MessageDirection, SenderType, WorkerType,
)
from ..llm.base import BaseLLMClient
from ..models import (
    IncomingMessage, Issue, LandlordSettings, Message, OrchestratorResponse,
    WorkerContext, WorkerResult, utcnow,
)
from ..storage.base import MaintenanceStore, ensure_conversation
from ..workers import BaseWorker, build_default_workers
from .models import OrchestratorSettings, SenderIdentity
from .routing import select_worker
from .sender import identify_sender

logger = logging.getLogger(__name__)

_PHOTO_TYPES = ("image", "video")
_VOICE_TYPES = ("audio",)


class Orchestrator:
    """
    Central coordinator for PropCare workers.

    Construct one per application; there is no global instance.

    Example:
        orchestrator = Orchestrator(llm_client, store, notifier=notifier)
        response = await orchestrator.route(IncomingMessage(from_="+447700900123", content="My tap is dripping"))
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        store: MaintenanceStore,
        workers: Optional[Dict[WorkerType, BaseWorker]] = None,
        notifier: Any = None,
        troubleshooting: Any = None,
        settings: Optional[OrchestratorSettings] = None,
    ):
        self.llm_client = llm_client
        self.store = store
        self.workers = workers if workers is not None else build_default_workers(llm_client)
        self.notifier = notifier
        self.troubleshooting = troubleshooting
        self.settings = settings or OrchestratorSettings()

    # ===== Entry point =====

    async def route(self, incoming: IncomingMessage) -> OrchestratorResponse:
        """Handle one inbound message and return the reply."""
        logger.info(f"Routing message from {incoming.from_}")

        try:
            sender = await identify_sender(self.store, incoming.from_, self.settings.country_code)
        except Exception as e:
            logger.error(f"Failed to identify sender {incoming.from_}: {e}", exc_info=True)
            return OrchestratorResponse(message=WORKER_UNAVAILABLE_REPLY, worker_used=WorkerType.TENANT)
        if sender is None:
            return OrchestratorResponse(message=UNKNOWN_SENDER_REPLY, worker_used=WorkerType.TENANT)

        try:
            context = await self.build_context(sender, incoming)
        except Exception as e:
            logger.error(f"Failed to build context for {incoming.from_}: {e}", exc_info=True)
            return OrchestratorResponse(message=WORKER_UNAVAILABLE_REPLY, worker_used=WorkerType.TENANT)

        worker_type = select_worker(sender.type, context.current_issue)
        worker = self.workers.get(worker_type)
        if worker is None:
            logger.error(f"Worker {worker_type.value} not registered")
            return OrchestratorResponse(message=WORKER_UNAVAILABLE_REPLY, worker_used=worker_type)

        text = self._message_text(incoming)
        logger.info(f"Conversation {context.conversation_id} -> {worker_type.value}")

        result = await worker.execute(text, context)
        if result.should_handoff:
            result, worker_type = await self.follow_handoffs(result, context, text, worker_type)

        if result.state_updates and context.current_issue:
            await self.apply_state_updates(context.current_issue.id, result.state_updates)

        await self.persist_turn(context.conversation_id, incoming, result)

        return OrchestratorResponse(
            message=result.message,
            worker_used=worker_type,
            issue_id=context.current_issue.id if context.current_issue else None,
            state_updates=result.state_updates,
            tools_executed=[tc.tool for tc in result.tool_calls],
        )

    # ===== Context =====

    async def build_context(self, sender: SenderIdentity, incoming: IncomingMessage) -> WorkerContext:
        conversation_id = incoming.conversation_id or sender.default_conversation_id()
        history = await self.load_history(conversation_id)

        current_issue: Optional[Issue] = None
        landlord_settings: Optional[LandlordSettings] = None

        if sender.type == SenderType.TENANT and sender.tenant and sender.property and sender.landlord:
            current_issue = await self.get_or_create_issue(sender, conversation_id)
            current_issue = await self._attach_media(current_issue, incoming)

        if sender.landlord is not None:
            landlord_settings = await self.store.get_landlord_settings(sender.landlord.id)

        return WorkerContext(
            conversation_id=conversation_id,
            sender_id=sender.entity_id(),
            sender_type=sender.type,
            tenant=sender.tenant,
            property=sender.property,
            landlord=sender.landlord,
            landlord_settings=landlord_settings,
            current_issue=current_issue,
            conversation_history=history,
            store=self.store,
            notifier=self.notifier,
            troubleshooting=self.troubleshooting,
            admin_phone=self.settings.admin_phone,
            metadata=dict(incoming.metadata),
        )

    async def load_history(self, conversation_id: str) -> List[Message]:
        try:
            return await self.store.get_recent_messages(conversation_id, limit=self.settings.history_limit)
        except Exception as e:
            logger.error(f"Failed to load history for {conversation_id}: {e}", exc_info=True)
            return []

    async def get_or_create_issue(self, sender: SenderIdentity, conversation_id: str) -> Issue:
        """The latest open issue in this conversation, or a new one."""
        tenant = sender.tenant
        existing = await self.store.get_latest_issue(tenant.id, conversation_id)
        if existing is not None and existing.is_open:
            return existing

        await ensure_conversation(self.store, conversation_id, tenant.phone)
        issue = await self.store.create_issue(
            tenant_id=tenant.id,
            property_id=sender.property.id,
            landlord_lead_id=sender.landlord.id,
            conversation_id=conversation_id,
        )
        logger.info(f"Created issue {issue.id} for tenant {tenant.id}")
        return issue

    async def _attach_media(self, issue: Issue, incoming: IncomingMessage) -> Issue:
        """Record inbound photos, videos and voice notes on the issue."""
        if not incoming.media_url:
            return issue

        if incoming.type in _PHOTO_TYPES:
            column = "photos"
        elif incoming.type in _VOICE_TYPES:
            column = "voice_notes"
        else:
            return issue

        media = [*(getattr(issue, column) or []), incoming.media_url]
        try:
            updated = await self.store.update_issue(issue.id, {column: media, "updated_at": utcnow()})
        except Exception as e:
            logger.error(f"Failed to attach {incoming.type} to issue {issue.id}: {e}", exc_info=True)
            return issue
        return updated or issue

    @staticmethod
    def _message_text(incoming: IncomingMessage) -> str:
        if incoming.content:
            return incoming.content
        if incoming.media_url:
            return f"[{incoming.type} received]"
        return ""

    # ===== Handoffs =====

    async def follow_handoffs(
        self,
        result: WorkerResult,
        context: WorkerContext,
        message: str,
        current: WorkerType,
    ) -> Tuple[WorkerResult, WorkerType]:
        """
        Chain worker executions while each result asks for a handoff.

        Tool calls accumulate across the chain and state updates are
        shallow-merged with later keys winning. At most
        ``max_handoff_depth`` additional workers run; past the cap, or when
        the target is not registered, the last result is returned.

        Returns:
            (merged result, worker that produced its message)
        """
        hops = 0
        while result.should_handoff:
            if hops >= self.settings.max_handoff_depth:
                logger.warning(
                    f"Max handoff depth ({self.settings.max_handoff_depth}) reached, "
                    f"ignoring handoff to {result.next_worker.value}"
                )
                return result, current

            target = self.workers.get(result.next_worker)
            if target is None:
                logger.error(f"Handoff target {result.next_worker.value} not registered")
                return result, current

            logger.info(f"Handing off to {result.next_worker.value}")
            current = result.next_worker
            next_result = await target.execute(message, context)
            hops += 1

            merged_updates = None
            if result.state_updates or next_result.state_updates:
                merged_updates = {**(result.state_updates or {}), **(next_result.state_updates or {})}

            result = WorkerResult(
                message=next_result.message,
                next_worker=next_result.next_worker,
                state_updates=merged_updates,
                tool_calls=[*result.tool_calls, *next_result.tool_calls],
            )

        return result, current

    # ===== Persistence =====

    async def apply_state_updates(self, issue_id: str, updates: Dict[str, Any]) -> None:
        try:
            await self.store.update_issue(issue_id, {**updates, "updated_at": utcnow()})
            logger.info(f"Issue {issue_id} updated: {', '.join(sorted(updates))}")
        except Exception as e:
            logger.error(f"Failed to update issue {issue_id}: {e}", exc_info=True)

    async def persist_turn(
        self,
        conversation_id: str,
        incoming: IncomingMessage,
        result: WorkerResult,
    ) -> None:
        """Append the inbound and outbound messages to the conversation log."""
        try:
            preview = incoming.content[:PREVIEW_LENGTH] if incoming.content else None
            await ensure_conversation(self.store, conversation_id, incoming.from_, preview)

            if incoming.content or incoming.media_url:
                await self.store.add_message(
                    conversation_id,
                    MessageDirection.INBOUND.value,
                    incoming.content,
                    type=incoming.type,
                    media_url=incoming.media_url,
                    status="delivered",
                )

            await self.store.add_message(
                conversation_id,
                MessageDirection.OUTBOUND.value,
                result.message,
                type="text",
                status="sent",
            )

            await self.store.update_conversation(conversation_id, {
                "last_message_at": utcnow(),
                "last_message_preview": result.message[:PREVIEW_LENGTH],
            })
        except Exception as e:
            logger.error(f"Failed to save conversation {conversation_id}: {e}", exc_info=True)
