"""
PropCare OpenAI Client - Chat Completions adapter

Supports any OpenAI-compatible Chat Completions endpoint (OpenAI, Azure,
vLLM, ...) via base_url.
"""

import json
import logging
import os
from typing import Dict, Any, List, Optional

from .base import (
    BaseLLMClient, ChatOptions, LLMConfig, LLMResponse, Usage, StopReason
)
from ..tools.models import ToolCall, ToolDefinition

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """
    OpenAI API client.

    Example:
        client = OpenAIClient(api_key="sk-xxx", model="gpt-4o")
        response = await client.chat([
            {"role": "user", "content": "My boiler is leaking"}
        ], tools=registry.get_tools())
    """

    provider = "openai"

    def __init__(self, config: Optional[LLMConfig] = None, **kwargs):
        """
        Initialize OpenAI client.

        Args:
            config: LLMConfig instance
            api_key: OpenAI API key (or set OPENAI_API_KEY env var)
            model: Model name
            base_url: Optional base URL for API
            **kwargs: Additional config options
        """
        if config is None and "api_key" not in kwargs:
            kwargs["api_key"] = os.environ.get("OPENAI_API_KEY")

        if config is None:
            if "model" not in kwargs:
                raise ValueError("model is required")
            config = LLMConfig(**kwargs)
            kwargs = {}

        super().__init__(config, **kwargs)

    def _get_client(self):
        """Get or create the OpenAI client"""
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError:
                raise ImportError(
                    "openai package not installed. "
                    "Install with: pip install openai"
                )

            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
                default_headers=self.config.default_headers or None,
            )

        return self._client

    @staticmethod
    def _format_tool(tool: ToolDefinition) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }

    @staticmethod
    def _format_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Translate provider-neutral messages into Chat Completions messages"""
        formatted = []
        for msg in messages:
            role = msg["role"]
            if role == "assistant" and msg.get("tool_calls"):
                formatted.append({
                    "role": "assistant",
                    "content": msg.get("content") or None,
                    "tool_calls": [
                        {
                            "id": tc["id"],
                            "type": "function",
                            "function": {
                                "name": tc["name"],
                                "arguments": json.dumps(tc.get("arguments") or {}),
                            },
                        }
                        for tc in msg["tool_calls"]
                    ],
                })
            elif role == "tool":
                formatted.append({
                    "role": "tool",
                    "tool_call_id": msg["tool_call_id"],
                    "content": msg.get("content", ""),
                })
            else:
                formatted.append({"role": role, "content": msg.get("content") or ""})
        return formatted

    @staticmethod
    def _parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Model returned non-JSON tool arguments: {raw[:200]}")
            return {}
        return parsed if isinstance(parsed, dict) else {}

    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolDefinition]],
        options: ChatOptions,
    ) -> LLMResponse:
        """Make OpenAI API call"""
        client = self._get_client()

        params = {
            "model": options.model,
            "messages": self._format_messages(messages),
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }

        if tools:
            params["tools"] = [self._format_tool(t) for t in tools]
            params["tool_choice"] = "auto"

        response = await client.chat.completions.create(**params)

        choice = response.choices[0]
        message = choice.message

        tool_calls = []
        for tc in message.tool_calls or []:
            tool_calls.append(ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=self._parse_arguments(tc.function.arguments),
            ))

        usage = None
        if response.usage:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )

        return LLMResponse(
            content=message.content or "",
            tool_calls=tool_calls,
            stop_reason=self._parse_stop_reason(choice.finish_reason),
            usage=usage,
            model=response.model,
            raw_response=response,
        )

    def _parse_stop_reason(self, finish_reason: Optional[str]) -> StopReason:
        """Parse OpenAI finish_reason to StopReason"""
        if finish_reason is None:
            return StopReason.END_TURN

        mapping = {
            "stop": StopReason.END_TURN,
            "length": StopReason.MAX_TOKENS,
            "tool_calls": StopReason.TOOL_USE,
            "content_filter": StopReason.END_TURN,
        }
        return mapping.get(finish_reason, StopReason.END_TURN)
