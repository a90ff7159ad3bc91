"""
PropCare Tool Registry - Name-keyed set of tools available to one worker turn
"""

import logging
from typing import Dict, Iterable, List, Optional

from .models import ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry of tool definitions keyed by name.

    Each worker builds its own registry (own tools + common tools + any
    extra tools for a call); there is no process-wide instance.

    Usage:
        registry = ToolRegistry([approve_issue_tool, reject_issue_tool])
        registry.register(extra_tool)
        schemas = registry.schemas()
    """

    def __init__(self, tools: Optional[Iterable[ToolDefinition]] = None):
        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool definition

        A later registration with the same name replaces the earlier one.
        """
        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' already registered, overwriting")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool definition by name, or None if not registered"""
        return self._tools.get(name)

    def get_tools(self) -> List[ToolDefinition]:
        """All registered tools in registration order"""
        return list(self._tools.values())

    def schemas(self) -> List[Dict]:
        """Provider-neutral schemas for every registered tool"""
        return [tool.to_schema() for tool in self._tools.values()]

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def merged(self, extra: Optional[Iterable[ToolDefinition]]) -> "ToolRegistry":
        """Return a new registry with ``extra`` tools layered on top"""
        combined = ToolRegistry(self._tools.values())
        for tool in extra or ():
            combined.register(tool)
        return combined

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"<ToolRegistry tools={len(self._tools)}>"
