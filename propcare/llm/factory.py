"""
PropCare LLM Factory - Select a reasoning backend adapter by provider name
"""

import logging
from typing import Optional

from .base import BaseLLMClient, LLMConfig

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic")


def create_llm_client(provider: str, config: Optional[LLMConfig] = None, **kwargs) -> BaseLLMClient:
    """
    Create an LLM client based on provider type.

    Args:
        provider: "openai" or "anthropic" (case-insensitive)
        config: LLMConfig for the client
        **kwargs: Override config values

    Raises:
        ValueError: If the provider is not supported
    """
    name = (provider or "").lower()

    if name == "openai":
        from .openai_client import OpenAIClient
        client = OpenAIClient(config=config, **kwargs)

    elif name == "anthropic":
        from .anthropic_client import AnthropicClient
        client = AnthropicClient(config=config, **kwargs)

    else:
        raise ValueError(
            f"Unknown LLM provider: {provider!r}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    logger.info(f"Created LLM client: {name}/{client.config.model}")
    return client
