"""Tests for propcare.orchestrator: sender lookup, routing, handoffs and persistence"""

from unittest.mock import AsyncMock

import pytest

from propcare.constants import (
    UNKNOWN_SENDER_REPLY, WORKER_UNAVAILABLE_REPLY, SenderType, WorkerType,
)
from propcare.models import IncomingMessage, Issue
from propcare.orchestrator import (
    Orchestrator,
    OrchestratorSettings,
    identify_sender,
    normalize_phone,
    select_worker,
)

from fakes import ScriptedLLM, reply, tool_calls

TENANT_PHONE = "+447700900123"
LANDLORD_PHONE = "+447700900001"


def _handoff(target):
    return tool_calls(("handoff_to_worker", {"worker": target.value, "reason": "next step"}))


async def _seed_issue(store, **fields):
    if "tenant_t1" not in store.conversations:
        await store.create_conversation("tenant_t1", TENANT_PHONE)
    issue = Issue(
        id=fields.pop("id", "issue1"),
        tenant_id="t1",
        property_id="p1",
        landlord_lead_id="ll1",
        conversation_id="tenant_t1",
        **fields,
    )
    return store.add_issue(issue)


# =========================================================================
# normalize_phone
# =========================================================================


class TestNormalizePhone:

    @pytest.mark.parametrize("raw, expected", [
        ("07700 900123", "+447700900123"),
        ("447700900123", "+447700900123"),
        ("+44 7700-900-123", "+447700900123"),
        ("+1 (555) 010-9999", "+15550109999"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_country_code(self):
        assert normalize_phone("0555 0109", country_code="1") == "+15550109"

    @pytest.mark.parametrize("raw", ["07700 900123", "+447700900123", "447700900123", "(020) 7946 0000"])
    def test_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once


# =========================================================================
# identify_sender / select_worker
# =========================================================================


class TestIdentifySender:

    @pytest.mark.asyncio
    async def test_tenant(self, store):
        sender = await identify_sender(store, "07700 900123")
        assert sender.type == SenderType.TENANT
        assert sender.tenant.id == "t1"
        assert sender.property.id == "p1"
        assert sender.landlord.id == "ll1"
        assert sender.default_conversation_id() == "tenant_t1"

    @pytest.mark.asyncio
    async def test_landlord(self, store):
        sender = await identify_sender(store, LANDLORD_PHONE)
        assert sender.type == SenderType.LANDLORD
        assert sender.tenant is None
        assert sender.default_conversation_id() == "landlord_ll1"

    @pytest.mark.asyncio
    async def test_non_landlord_lead_is_unknown(self, store):
        assert await identify_sender(store, "+447700900555") is None

    @pytest.mark.asyncio
    async def test_unknown(self, store):
        assert await identify_sender(store, "+447700900777") is None


class TestSelectWorker:

    def _issue(self, **fields):
        return Issue(id="i1", tenant_id="t1", property_id="p1", landlord_lead_id="ll1",
                     conversation_id="c1", **fields)

    def test_landlord_always_landlord_worker(self):
        issue = self._issue(status="reported")
        assert select_worker(SenderType.LANDLORD, issue) == WorkerType.LANDLORD

    def test_new_tenant_issue(self):
        assert select_worker(SenderType.TENANT, self._issue()) == WorkerType.TENANT
        assert select_worker(SenderType.TENANT, None) == WorkerType.TENANT

    def test_awaiting_details_complete_goes_to_triage(self):
        issue = self._issue(status="awaiting_details", issue_description="Dripping tap",
                            photos=["https://img/1.jpg"], tenant_availability="mornings")
        assert select_worker(SenderType.TENANT, issue) == WorkerType.TRIAGE

    def test_awaiting_details_incomplete_stays_with_tenant(self):
        issue = self._issue(status="awaiting_details", issue_description="Dripping tap")
        assert select_worker(SenderType.TENANT, issue) == WorkerType.TENANT

    def test_reported_goes_to_dispatch(self):
        assert select_worker(SenderType.TENANT, self._issue(status="reported")) == WorkerType.DISPATCH


# =========================================================================
# Orchestrator.route
# =========================================================================


class TestRoute:

    @pytest.mark.asyncio
    async def test_unknown_sender(self, store):
        llm = ScriptedLLM()
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_="+447700900777", content="Hello"))

        assert response.message == UNKNOWN_SENDER_REPLY
        assert response.worker_used == WorkerType.TENANT
        assert llm.calls == []
        assert store.conversations == {}

    @pytest.mark.asyncio
    async def test_new_tenant_message(self, store):
        llm = ScriptedLLM([reply("Sorry to hear that. Which tap is it?")])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_="07700 900123", content="My tap is dripping"))

        assert response.message == "Sorry to hear that. Which tap is it?"
        assert response.worker_used == WorkerType.TENANT
        issue = store.issues[response.issue_id]
        assert issue.status == "new"
        assert issue.conversation_id == "tenant_t1"

        messages = store.messages["tenant_t1"]
        assert [(m.direction, m.content) for m in messages] == [
            ("inbound", "My tap is dripping"),
            ("outbound", "Sorry to hear that. Which tap is it?"),
        ]
        assert messages[0].status == "delivered"
        assert store.conversations["tenant_t1"].last_message_preview == "Sorry to hear that. Which tap is it?"

    @pytest.mark.asyncio
    async def test_open_issue_is_reused(self, store):
        await _seed_issue(store, status="ai_helping")
        orchestrator = Orchestrator(ScriptedLLM([reply("ok")]), store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Still dripping"))

        assert response.issue_id == "issue1"
        assert len(store.issues) == 1

    @pytest.mark.asyncio
    async def test_closed_issue_starts_new_one(self, store):
        await _seed_issue(store, status="completed")
        orchestrator = Orchestrator(ScriptedLLM([reply("ok")]), store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="New problem"))

        assert response.issue_id != "issue1"
        assert len(store.issues) == 2

    @pytest.mark.asyncio
    async def test_landlord_routed_to_landlord_worker(self, store):
        llm = ScriptedLLM([reply("You have no pending approvals.")])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=LANDLORD_PHONE, content="Anything pending?"))

        assert response.worker_used == WorkerType.LANDLORD
        assert response.issue_id is None
        assert "get_pending_approvals" in llm.calls[0]["tools"]
        assert "landlord_ll1" in store.conversations

    @pytest.mark.asyncio
    async def test_complete_details_routed_to_triage(self, store):
        await _seed_issue(
            store,
            status="awaiting_details",
            issue_description="Kitchen tap dripping constantly",
            photos=["https://img/tap.jpg"],
            tenant_availability="weekday mornings",
        )
        llm = ScriptedLLM([reply("Thanks, that looks like a washer replacement.")])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Any update?"))

        assert response.worker_used == WorkerType.TRIAGE
        assert "categorize_and_price" in llm.calls[0]["tools"]

    @pytest.mark.asyncio
    async def test_reported_routed_to_dispatch(self, store):
        await _seed_issue(store, status="reported", issue_description="Broken boiler")
        llm = ScriptedLLM([reply("I'm arranging an engineer.")])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="When can someone come?"))

        assert response.worker_used == WorkerType.DISPATCH
        assert "book_job" in llm.calls[0]["tools"]

    @pytest.mark.asyncio
    async def test_handoff_with_state_updates(self, store):
        llm = ScriptedLLM([
            tool_calls(
                ("update_issue_state", {"status": "awaiting_details", "issueDescription": "Dripping kitchen tap"}),
                ("handoff_to_worker", {"worker": "TRIAGE_WORKER", "reason": "Ready for pricing"}),
            ),
            reply("Let me get that priced."),
            tool_calls(("update_issue_state", {"issueCategory": "plumbing", "urgency": "medium"})),
            reply("This should cost around £120."),
        ])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Kitchen tap won't stop"))

        assert response.message == "This should cost around £120."
        assert response.worker_used == WorkerType.TRIAGE
        assert response.tools_executed == ["update_issue_state", "handoff_to_worker", "update_issue_state"]
        assert response.state_updates == {
            "status": "awaiting_details",
            "issue_description": "Dripping kitchen tap",
            "issue_category": "plumbing",
            "urgency": "medium",
        }

        issue = store.issues[response.issue_id]
        assert issue.status == "awaiting_details"
        assert issue.issue_description == "Dripping kitchen tap"
        assert issue.issue_category == "plumbing"

        # Both workers received the original message
        assert llm.calls[0]["messages"][-1]["content"] == "Kitchen tap won't stop"
        assert llm.calls[2]["messages"][-1]["content"] == "Kitchen tap won't stop"

    @pytest.mark.asyncio
    async def test_handoff_depth_cap(self, store):
        chain = [WorkerType.TRIAGE, WorkerType.DISPATCH, WorkerType.LANDLORD, WorkerType.TENANT, WorkerType.TRIAGE]
        script = []
        for i, target in enumerate(chain):
            script += [_handoff(target), reply(f"step {i}")]
        llm = ScriptedLLM(script)
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Help"))

        # First worker plus three handoffs
        assert len(llm.calls) == 8
        assert response.message == "step 3"
        assert response.worker_used == WorkerType.LANDLORD
        assert response.tools_executed == ["handoff_to_worker"] * 4

    @pytest.mark.asyncio
    async def test_worker_handing_off_to_itself_is_capped(self, store):
        script = []
        for i in range(6):
            script += [_handoff(WorkerType.TENANT), reply(f"loop {i}")]
        llm = ScriptedLLM(script)
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Help"))

        assert len(llm.calls) == 8
        assert response.message == "loop 3"
        assert response.worker_used == WorkerType.TENANT
        assert response.tools_executed == ["handoff_to_worker"] * 4

    @pytest.mark.asyncio
    async def test_configurable_depth(self, store):
        llm = ScriptedLLM([_handoff(WorkerType.TRIAGE), reply("first"), _handoff(WorkerType.DISPATCH), reply("second")])
        orchestrator = Orchestrator(llm, store, settings=OrchestratorSettings(max_handoff_depth=0))

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Help"))

        assert response.message == "first"
        assert len(llm.calls) == 2

    @pytest.mark.asyncio
    async def test_unregistered_handoff_target(self, store):
        llm = ScriptedLLM([_handoff(WorkerType.INSPECTOR), reply("I'll book an inspection.")])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Can someone inspect?"))

        assert response.message == "I'll book an inspection."
        assert response.worker_used == WorkerType.TENANT
        assert len(llm.calls) == 2

    @pytest.mark.asyncio
    async def test_missing_worker(self, store):
        orchestrator = Orchestrator(ScriptedLLM(), store, workers={})

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Hello"))

        assert response.message == WORKER_UNAVAILABLE_REPLY
        assert response.worker_used == WorkerType.TENANT

    @pytest.mark.asyncio
    async def test_sender_lookup_failure_replies(self, store, monkeypatch):
        monkeypatch.setattr(store, "find_tenant_by_phone", AsyncMock(side_effect=ConnectionError("db down")))
        llm = ScriptedLLM()
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(from_="07700900123", content="tap"))

        assert response.message == WORKER_UNAVAILABLE_REPLY
        assert response.worker_used == WorkerType.TENANT
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_save_failure_still_replies(self, store, monkeypatch):
        monkeypatch.setattr(store, "add_message", AsyncMock(side_effect=RuntimeError("db down")))
        orchestrator = Orchestrator(ScriptedLLM([reply("Noted, thanks.")]), store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Hello"))

        assert response.message == "Noted, thanks."

    @pytest.mark.asyncio
    async def test_state_update_failure_still_replies(self, store, monkeypatch):
        await _seed_issue(store, status="ai_helping")
        llm = ScriptedLLM([tool_calls(("update_issue_state", {"status": "awaiting_details"})), reply("Got it.")])
        orchestrator = Orchestrator(llm, store)
        monkeypatch.setattr(store, "update_issue", AsyncMock(side_effect=RuntimeError("db down")))

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Hello"))

        assert response.message == "Got it."
        assert response.state_updates == {"status": "awaiting_details"}

    @pytest.mark.asyncio
    async def test_photo_attached_to_issue(self, store):
        llm = ScriptedLLM([reply("Thanks for the photo.")])
        orchestrator = Orchestrator(llm, store)

        response = await orchestrator.route(IncomingMessage(
            from_=TENANT_PHONE, type="image", media_url="https://img/leak.jpg",
        ))

        assert store.issues[response.issue_id].photos == ["https://img/leak.jpg"]
        assert llm.calls[0]["messages"][-1]["content"] == "[image received]"
        inbound = store.messages["tenant_t1"][0]
        assert inbound.type == "image"
        assert inbound.media_url == "https://img/leak.jpg"

    @pytest.mark.asyncio
    async def test_voice_note_attached_to_issue(self, store):
        orchestrator = Orchestrator(ScriptedLLM([reply("Thanks.")]), store)

        response = await orchestrator.route(IncomingMessage(
            from_=TENANT_PHONE, type="audio", media_url="https://media/note.ogg",
        ))

        assert store.issues[response.issue_id].voice_notes == ["https://media/note.ogg"]

    @pytest.mark.asyncio
    async def test_history_included_on_next_turn(self, store):
        llm = ScriptedLLM([reply("Which tap?"), reply("Thanks.")])
        orchestrator = Orchestrator(llm, store)

        await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="My tap is dripping"))
        await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="The kitchen one"))

        second = llm.calls[1]["messages"]
        assert [(m["role"], m["content"]) for m in second[1:]] == [
            ("user", "My tap is dripping"),
            ("assistant", "Which tap?"),
            ("user", "The kitchen one"),
        ]

    @pytest.mark.asyncio
    async def test_explicit_conversation_id(self, store):
        orchestrator = Orchestrator(ScriptedLLM([reply("ok")]), store)

        await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Hi", conversation_id="wa_thread_9"))

        assert "wa_thread_9" in store.conversations
        assert store.conversations["wa_thread_9"].phone_number == TENANT_PHONE

    @pytest.mark.asyncio
    async def test_response_to_dict(self, store):
        orchestrator = Orchestrator(ScriptedLLM([reply("ok")]), store)

        response = await orchestrator.route(IncomingMessage(from_=TENANT_PHONE, content="Hi"))

        data = response.to_dict()
        assert data["workerUsed"] == "TENANT_WORKER"
        assert data["issueId"] == response.issue_id
        assert data["toolsExecuted"] == []
