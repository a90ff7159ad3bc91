"""
PropCare Anthropic Client - Messages API adapter

The system prompt is hoisted out of the message list, assistant tool calls
become ``tool_use`` blocks and tool results become ``tool_result`` blocks
inside a user turn (consecutive results share one user turn).
"""

import os
from typing import Dict, Any, List, Optional

from .base import (
    BaseLLMClient, ChatOptions, LLMConfig, LLMResponse, Usage, StopReason
)
from ..tools.models import ToolCall, ToolDefinition

EMPTY_TURN_PLACEHOLDER = "[empty message]"

class AnthropicClient(BaseLLMClient):
    """
    Anthropic API client.

    Example:
        client = AnthropicClient(api_key="sk-ant-xxx", model="claude-sonnet-4-5")
        response = await client.chat([
            {"role": "system", "content": "You are a maintenance assistant."},
            {"role": "user", "content": "The kitchen tap is dripping"}
        ])
    """

    provider = "anthropic"

    def __init__(self, config: Optional[LLMConfig] = None, **kwargs):
        """
        Initialize Anthropic client.

        Args:
            config: LLMConfig instance
            api_key: Anthropic API key (or set ANTHROPIC_API_KEY env var)
            model: Model name
            **kwargs: Additional config options
        """
        if config is None and "api_key" not in kwargs:
            kwargs["api_key"] = os.environ.get("ANTHROPIC_API_KEY")

        if config is None:
            if "model" not in kwargs:
                raise ValueError("model is required")
            config = LLMConfig(**kwargs)
            kwargs = {}

        super().__init__(config, **kwargs)

    def _get_client(self):
        """Get or create the Anthropic client"""
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError:
                raise ImportError(
                    "anthropic package not installed. "
                    "Install with: pip install anthropic"
                )

            self._client = AsyncAnthropic(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
                default_headers=self.config.default_headers or None,
            )

        return self._client

    @staticmethod
    def _format_tool(tool: ToolDefinition) -> Dict[str, Any]:
        """Format tool to Anthropic format"""
        return {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.parameters,
        }

    @staticmethod
    def _format_messages(messages: List[Dict[str, Any]]):
        """
        Split out the system prompt and convert the rest to Anthropic turns.

        Returns:
            (system, messages) tuple
        """
        system_parts: List[str] = []
        formatted: List[Dict[str, Any]] = []

        for msg in messages:
            role = msg["role"]

            if role == "system":
                if msg.get("content"):
                    system_parts.append(msg["content"])

            elif role == "assistant" and msg.get("tool_calls"):
                blocks = []
                if msg.get("content"):
                    blocks.append({"type": "text", "text": msg["content"]})
                for tc in msg["tool_calls"]:
                    blocks.append({
                        "type": "tool_use",
                        "id": tc["id"],
                        "name": tc["name"],
                        "input": tc.get("arguments") or {},
                    })
                formatted.append({"role": "assistant", "content": blocks})

            elif role == "tool":
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg["tool_call_id"],
                    "content": msg.get("content", ""),
                }
                previous = formatted[-1] if formatted else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and previous["content"]
                    and previous["content"][-1].get("type") == "tool_result"
                ):
                    previous["content"].append(block)
                else:
                    formatted.append({"role": "user", "content": [block]})

            else:
                # the Messages API rejects empty text turns
                formatted.append({"role": role, "content": msg.get("content") or EMPTY_TURN_PLACEHOLDER})

        return "\n\n".join(system_parts), formatted

    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolDefinition]],
        options: ChatOptions,
    ) -> LLMResponse:
        """Make Anthropic API call"""
        client = self._get_client()

        system, turns = self._format_messages(messages)

        params = {
            "model": options.model,
            "messages": turns,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }

        if system:
            params["system"] = system

        if tools:
            params["tools"] = [self._format_tool(t) for t in tools]
            params["tool_choice"] = {"type": "auto"}

        response = await client.messages.create(**params)

        content = ""
        tool_calls = []

        for block in response.content:
            if block.type == "text":
                content += block.text
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(
                    id=block.id,
                    name=block.name,
                    arguments=dict(block.input or {}),
                ))

        usage = Usage(
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
        )

        return LLMResponse(
            content=content,
            tool_calls=tool_calls,
            stop_reason=self._parse_stop_reason(response.stop_reason),
            usage=usage,
            model=response.model,
            raw_response=response,
        )

    def _parse_stop_reason(self, stop_reason: Optional[str]) -> StopReason:
        """Parse Anthropic stop_reason to StopReason"""
        if stop_reason is None:
            return StopReason.END_TURN

        mapping = {
            "end_turn": StopReason.END_TURN,
            "max_tokens": StopReason.MAX_TOKENS,
            "stop_sequence": StopReason.STOP_SEQUENCE,
            "tool_use": StopReason.TOOL_USE,
        }
        return mapping.get(stop_reason, StopReason.END_TURN)
