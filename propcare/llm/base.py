"""
PropCare LLM Client Base - Base class and common types for reasoning backends

This module provides:
- BaseLLMClient: Abstract base class for all backend adapters
- LLMConfig: Configuration dataclass
- ChatOptions: Per-call sampling options
- LLMResponse: Standardized response format

Message format (provider-neutral, translated by each adapter):
    {"role": "system" | "user", "content": str}
    {"role": "assistant", "content": str, "tool_calls": [{"id", "name", "arguments"}]}
    {"role": "tool", "tool_call_id": str, "name": str, "content": str}
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Union

from ..tools.models import ToolCall, ToolDefinition


class StopReason(str, Enum):
    """Reason why the LLM stopped generating"""
    END_TURN = "end_turn"           # Natural completion
    MAX_TOKENS = "max_tokens"       # Hit token limit
    STOP_SEQUENCE = "stop_sequence" # Hit stop sequence
    TOOL_USE = "tool_use"           # Model wants to use a tool
    ERROR = "error"                 # Error occurred


@dataclass
class LLMConfig:
    """
    Configuration for LLM clients.

    Attributes:
        api_key: API key for the provider
        model: Default model name
        base_url: Optional base URL override for API
        temperature: Default sampling temperature
        max_tokens: Default maximum tokens in response
        timeout: Request timeout in seconds
        default_headers: Additional headers to send with requests

    SDK clients are always built with max_retries=0: this adapter translates
    exactly one chat turn and never retries.
    """
    api_key: Optional[str] = None
    model: str = "gpt-4o"
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout: int = 60
    default_headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class ChatOptions:
    """Sampling options for a single chat call; None falls back to LLMConfig."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    model: Optional[str] = None


@dataclass
class Usage:
    """Token usage information"""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class LLMResponse:
    """
    Standardized LLM response format.

    All adapters return this format, so no caller depends on the
    concrete backend.
    """
    content: str
    tool_calls: List[ToolCall] = field(default_factory=list)
    stop_reason: StopReason = StopReason.END_TURN
    usage: Optional[Usage] = None
    model: Optional[str] = None

    # Raw response for debugging
    raw_response: Optional[Any] = None

    @property
    def has_tool_calls(self) -> bool:
        """Check if response contains tool calls"""
        return len(self.tool_calls) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
            "stop_reason": self.stop_reason.value,
            "usage": self.usage.to_dict() if self.usage else None,
            "model": self.model,
        }


class BaseLLMClient(ABC):
    """
    Abstract base class for reasoning backend adapters.

    Subclasses translate the provider-neutral message list into one SDK call
    and normalize the reply into an LLMResponse. They must not retry and
    must not execute tools.

    Example:
        class MyClient(BaseLLMClient):
            async def _call_api(self, messages, tools, options):
                # Provider-specific implementation
                pass
    """

    # Provider name (override in subclasses)
    provider: str = "unknown"

    def __init__(self, config: Optional[LLMConfig] = None, **kwargs):
        """
        Initialize the client.

        Args:
            config: LLMConfig instance
            **kwargs: Override config values
        """
        if config is None:
            config = LLMConfig(**kwargs)
        else:
            for key, value in kwargs.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        self.config = config
        self._client = None  # Lazy-initialized SDK client

    @abstractmethod
    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolDefinition]],
        options: ChatOptions,
    ) -> LLMResponse:
        """
        Make the actual API call (provider-specific).

        Args:
            messages: Provider-neutral message dicts
            tools: Tool definitions, or None
            options: Resolved sampling options

        Returns:
            LLMResponse with standardized format
        """
        pass

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Union[ToolDefinition, Dict[str, Any]]]] = None,
        options: Optional[ChatOptions] = None,
    ) -> LLMResponse:
        """
        Send one chat turn to the backend.

        Args:
            messages: Ordered role-tagged message dicts
            tools: Optional tools (ToolDefinition or {name, description, parameters})
            options: Optional per-call sampling options

        Returns:
            LLMResponse with content, tool_calls, stop_reason and usage

        Example:
            response = await client.chat([
                {"role": "system", "content": "You are helpful."},
                {"role": "user", "content": "Hello!"}
            ])
            print(response.content)
        """
        tool_defs = None
        if tools:
            tool_defs = [self._coerce_tool(t) for t in tools]

        return await self._call_api(messages, tool_defs, self._resolve_options(options))

    def _resolve_options(self, options: Optional[ChatOptions]) -> ChatOptions:
        options = options or ChatOptions()
        return ChatOptions(
            temperature=self.config.temperature if options.temperature is None else options.temperature,
            max_tokens=options.max_tokens or self.config.max_tokens,
            model=options.model or self.config.model,
        )

    @staticmethod
    def _coerce_tool(tool: Union[ToolDefinition, Dict[str, Any]]) -> ToolDefinition:
        if isinstance(tool, ToolDefinition):
            return tool
        return ToolDefinition(
            name=tool["name"],
            description=tool.get("description", ""),
            parameters=tool.get("parameters", {"type": "object", "properties": {}}),
            executor=None,
        )

    async def close(self) -> None:
        """Close the client and release resources"""
        if self._client and hasattr(self._client, "close"):
            await self._client.close()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
