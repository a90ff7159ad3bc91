"""
PropCare Tools - Tool definitions and registry

The executor and conversation turn driver live in ``propcare.tools.executor``.
"""

from .models import ToolCall, ToolDefinition, ToolResult
from .registry import ToolRegistry

__all__ = [
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "ToolRegistry",
]
