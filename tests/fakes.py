"""Scripted stand-ins shared by the test modules."""

import copy
from typing import Any, Dict, List, Optional, Tuple, Union

from propcare.llm.base import BaseLLMClient, ChatOptions, LLMConfig, LLMResponse, StopReason, Usage
from propcare.tools.models import ToolCall, ToolDefinition


class ScriptedLLM(BaseLLMClient):
    """Returns queued responses in order; an Exception in the queue is raised."""

    provider = "scripted"

    def __init__(self, responses: Optional[List[Union[LLMResponse, Exception]]] = None):
        super().__init__(LLMConfig(model="scripted-model"))
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolDefinition]],
        options: ChatOptions,
    ) -> LLMResponse:
        self.calls.append({
            "messages": copy.deepcopy(messages),
            "tools": [t.name for t in tools or []],
            "options": options,
        })
        if not self.responses:
            return LLMResponse(content="ok")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def reply(text: str, prompt_tokens: int = 0, completion_tokens: int = 0) -> LLMResponse:
    return LLMResponse(content=text, usage=Usage(prompt_tokens, completion_tokens))


def tool_calls(*calls: Tuple[str, Dict[str, Any]], content: str = "") -> LLMResponse:
    return LLMResponse(
        content=content,
        tool_calls=[
            ToolCall(id=f"call_{i}", name=name, arguments=args)
            for i, (name, args) in enumerate(calls)
        ],
        stop_reason=StopReason.TOOL_USE,
    )
