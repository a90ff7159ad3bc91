"""
PropCare LLM Clients - Reasoning backend adapters

Provides a provider-neutral BaseLLMClient with OpenAI and Anthropic
implementations:

Usage:
    from propcare.llm import create_llm_client, LLMConfig

    client = create_llm_client("anthropic", LLMConfig(model="claude-sonnet-4-5", api_key="sk-ant-xxx"))
    response = await client.chat(messages=[...], tools=registry.get_tools())
"""

from .base import BaseLLMClient, ChatOptions, LLMConfig, LLMResponse, StopReason, Usage
from .factory import create_llm_client, SUPPORTED_PROVIDERS

__all__ = [
    "BaseLLMClient",
    "ChatOptions",
    "LLMConfig",
    "LLMResponse",
    "StopReason",
    "Usage",
    "create_llm_client",
    "SUPPORTED_PROVIDERS",
]
