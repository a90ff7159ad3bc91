"""Tests for propcare.workers: prompt assembly, control signals and worker tool sets"""

from datetime import timedelta

import pytest

from propcare.constants import WorkerType
from propcare.models import Message, ToolInvocation, utcnow
from propcare.workers import (
    DispatchWorker,
    LandlordWorker,
    TenantWorker,
    TriageWorker,
    build_default_workers,
    map_state_updates,
)

from fakes import ScriptedLLM, reply, tool_calls


def _history(count):
    start = utcnow() - timedelta(minutes=count)
    return [
        Message(
            id=f"m{i}",
            conversation_id="tenant_t1",
            direction="inbound" if i % 2 == 0 else "outbound",
            content=f"message {i}",
            created_at=start + timedelta(minutes=i),
        )
        for i in range(count)
    ]


# =========================================================================
# Registry of workers
# =========================================================================


class TestBuildDefaultWorkers:

    def test_four_workers_keyed_by_type(self):
        workers = build_default_workers(ScriptedLLM())
        assert set(workers) == {WorkerType.TENANT, WorkerType.TRIAGE, WorkerType.DISPATCH, WorkerType.LANDLORD}
        assert WorkerType.INSPECTOR not in workers
        assert isinstance(workers[WorkerType.DISPATCH], DispatchWorker)

    @pytest.mark.parametrize("worker_cls, expected", [
        (TenantWorker, {
            "start_troubleshooting", "continue_troubleshooting", "get_diy_advice", "assess_issue",
            "request_photos", "request_availability", "mark_resolved_diy", "ready_for_triage",
        }),
        (TriageWorker, {"categorize_and_price", "search_similar_skus", "calculate_complexity", "ready_for_dispatch"}),
        (DispatchWorker, {
            "get_landlord_rules", "evaluate_dispatch", "check_availability", "book_job",
            "request_landlord_approval", "notify_landlord", "update_budget_spend",
        }),
        (LandlordWorker, {
            "get_pending_approvals", "approve_issue", "reject_issue", "get_spending_summary",
            "get_property_issues", "update_settings", "list_properties",
        }),
    ])
    def test_tool_sets_include_common_tools(self, worker_cls, expected):
        names = set(worker_cls(ScriptedLLM()).registry.names())
        assert names == expected | {"handoff_to_worker", "update_issue_state", "escalate_to_human"}


# =========================================================================
# Prompt assembly
# =========================================================================


class TestBuildSystemPrompt:

    @pytest.mark.asyncio
    async def test_tenant_context_block(self, tenant_context):
        prompt = TenantWorker(ScriptedLLM()).build_system_prompt(tenant_context)
        assert "## Current Context" in prompt
        assert "- Tenant: Alex Tenant" in prompt
        assert "- Phone: +447700900123" in prompt
        assert "- Property: 1 High Street" in prompt
        assert "- Postcode: SW1A 1AA" in prompt
        assert "- Landlord: Sam Landlord" in prompt
        assert "- Description: Not yet provided" in prompt
        assert "- Status: new" in prompt
        assert "- Category: Not categorized" in prompt
        assert "- Urgency: Not assessed" in prompt
        assert "## Reference IDs" not in prompt

    @pytest.mark.asyncio
    async def test_dispatch_prompt_carries_reference_ids(self, tenant_context):
        prompt = DispatchWorker(ScriptedLLM()).build_system_prompt(tenant_context)
        assert "- Landlord ID: ll1" in prompt
        assert "- Property ID: p1" in prompt
        assert f"- Issue ID: {tenant_context.current_issue.id}" in prompt

    def test_landlord_prompt_has_no_tenant_block(self, landlord_context):
        prompt = LandlordWorker(ScriptedLLM()).build_system_prompt(landlord_context)
        assert "- Tenant:" not in prompt
        assert "## Current Issue" not in prompt
        assert "- Landlord ID: ll1" in prompt


class TestBuildMessages:

    @pytest.mark.asyncio
    async def test_only_last_ten_history_messages(self, tenant_context):
        tenant_context.conversation_history = _history(15)
        messages = TenantWorker(ScriptedLLM()).build_messages("new message", tenant_context)

        assert len(messages) == 12
        assert messages[0]["role"] == "system"
        assert messages[1]["content"] == "message 5"
        assert messages[1]["role"] == "assistant"
        assert messages[2]["role"] == "user"
        assert messages[-1] == {"role": "user", "content": "new message"}

    @pytest.mark.asyncio
    async def test_media_only_history_is_described(self, tenant_context):
        tenant_context.conversation_history = [
            Message(id="m1", conversation_id="tenant_t1", direction="inbound", content=None,
                    type="image", media_url="https://example.com/tap.jpg"),
        ]
        messages = TenantWorker(ScriptedLLM()).build_messages("Here it is", tenant_context)

        assert messages[1] == {"role": "user", "content": "[image received]"}


# =========================================================================
# Control signals
# =========================================================================


class TestParseToolResults:

    def _worker(self):
        return TenantWorker(ScriptedLLM())

    def test_last_handoff_wins(self):
        next_worker, _ = self._worker().parse_tool_results([
            ToolInvocation(tool="handoff_to_worker", args={"worker": "TRIAGE_WORKER"}, result={}),
            ToolInvocation(tool="handoff_to_worker", args={"worker": "DISPATCH_WORKER"}, result={}),
        ])
        assert next_worker == WorkerType.DISPATCH

    def test_unknown_handoff_target_ignored(self):
        next_worker, _ = self._worker().parse_tool_results([
            ToolInvocation(tool="handoff_to_worker", args={"worker": "PLUMBER_WORKER"}, result={}),
        ])
        assert next_worker is None

    def test_state_updates_merge_later_wins(self):
        _, updates = self._worker().parse_tool_results([
            ToolInvocation(tool="update_issue_state", args={"status": "ai_helping", "urgency": "low"}, result={}),
            ToolInvocation(tool="get_diy_advice", args={"issueType": "tap"}, result={}),
            ToolInvocation(tool="update_issue_state", args={"status": "awaiting_details"}, result={}),
        ])
        assert updates == {"status": "awaiting_details", "urgency": "low"}

    def test_no_signals(self):
        assert self._worker().parse_tool_results([]) == (None, None)

    def test_rejected_calls_carry_no_signal(self):
        next_worker, updates = self._worker().parse_tool_results([
            ToolInvocation(tool="update_issue_state", args={"status": "ai_helping"}, result={}),
            ToolInvocation(tool="update_issue_state", args={"status": "bogus_status"}, result={"error": "x"}, is_error=True),
            ToolInvocation(tool="handoff_to_worker", args={"worker": "TRIAGE_WORKER"}, result={"error": "x"}, is_error=True),
        ])
        assert next_worker is None
        assert updates == {"status": "ai_helping"}

    def test_map_state_updates(self):
        assert map_state_updates({
            "issueCategory": "plumbing",
            "issueDescription": "Dripping tap",
            "tenantAvailability": "weekday mornings",
            "accessInstructions": "Key under mat",
        }) == {
            "issue_category": "plumbing",
            "issue_description": "Dripping tap",
            "tenant_availability": "weekday mornings",
            "access_instructions": "Key under mat",
        }


# =========================================================================
# Execution
# =========================================================================


class TestExecute:

    @pytest.mark.asyncio
    async def test_handoff_and_state_updates(self, tenant_context):
        llm = ScriptedLLM([
            tool_calls(
                ("update_issue_state", {"status": "awaiting_details", "issueDescription": "Dripping kitchen tap"}),
                ("handoff_to_worker", {"worker": "TRIAGE_WORKER", "reason": "Details complete"}),
            ),
            reply("Thanks, I'm getting this priced up for you."),
        ])
        result = await TenantWorker(llm).execute("It's the kitchen tap", tenant_context)

        assert result.message == "Thanks, I'm getting this priced up for you."
        assert result.next_worker == WorkerType.TRIAGE
        assert result.should_handoff
        assert result.state_updates == {"status": "awaiting_details", "issue_description": "Dripping kitchen tap"}
        assert [tc.tool for tc in result.tool_calls] == ["update_issue_state", "handoff_to_worker"]

    @pytest.mark.asyncio
    async def test_invalid_control_calls_are_not_applied(self, tenant_context):
        llm = ScriptedLLM([
            tool_calls(
                ("update_issue_state", {"status": "bogus_status", "urgency": "catastrophic"}),
                ("handoff_to_worker", {"worker": "TRIAGE_WORKER"}),
            ),
            reply("Could you tell me a bit more?"),
        ])
        result = await TenantWorker(llm).execute("It's the tap", tenant_context)

        assert result.next_worker is None
        assert result.state_updates is None
        assert [tc.is_error for tc in result.tool_calls] == [True, True]
        assert "Invalid arguments" in result.tool_calls[0].result["error"]

    @pytest.mark.asyncio
    async def test_worker_chat_options(self, tenant_context):
        llm = ScriptedLLM([reply("ok")])
        await TriageWorker(llm).execute("price it", tenant_context)
        options = llm.calls[0]["options"]
        assert options.temperature == 0.3
        assert options.max_tokens == 512

    @pytest.mark.asyncio
    async def test_extra_tools_only_for_this_call(self, tenant_context):
        from propcare.tools.models import ToolDefinition

        async def _noop(args, context):
            return {}

        extra = ToolDefinition(name="lookup_warranty", description="", parameters={"type": "object"}, executor=_noop)
        worker = TenantWorker(ScriptedLLM([reply("ok"), reply("ok")]))

        await worker.execute("hi", tenant_context, extra_tools=[extra])
        await worker.execute("hi", tenant_context)

        assert "lookup_warranty" in worker.llm_client.calls[0]["tools"]
        assert "lookup_warranty" not in worker.llm_client.calls[1]["tools"]

    @pytest.mark.asyncio
    async def test_escalation_alerts_admin(self, tenant_context, notifier):
        tenant_context.admin_phone = "+447700900999"
        llm = ScriptedLLM([
            tool_calls(("escalate_to_human", {"reason": "Tenant reports gas smell", "urgency": "emergency"})),
            reply("Please leave the property and call the gas emergency line."),
        ])
        result = await TenantWorker(llm).execute("I can smell gas", tenant_context)

        assert result.tool_calls[0].result == {"escalated": True, "reason": "Tenant reports gas smell"}
        assert len(notifier.sent) == 1
        to, body = notifier.sent[0]
        assert to == "+447700900999"
        assert tenant_context.current_issue.id in body
