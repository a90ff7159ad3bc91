"""
PropCare Tool Models - Data structures for the tool system
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class ToolDefinition:
    """
    Definition of a tool that can be called by the model

    Attributes:
        name: Unique tool identifier (e.g., "approve_issue")
        description: What the tool does (shown to the model)
        parameters: JSON Schema for parameters
        executor: Async function(args: dict, context: WorkerContext) -> Any

    Example:
        async def get_landlord_rules(args, context) -> dict:
            return {...}

        tool = ToolDefinition(
            name="get_landlord_rules",
            description="Get landlord auto-approval rules and settings",
            parameters={
                "type": "object",
                "properties": {
                    "landlordId": {"type": "string", "description": "Landlord lead ID"}
                },
                "required": ["landlordId"]
            },
            executor=get_landlord_rules,
        )
    """
    name: str
    description: str
    parameters: Dict[str, Any]
    executor: Optional[Callable]

    def to_schema(self) -> Dict[str, Any]:
        """Provider-neutral schema: name, description, parameters"""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass
class ToolCall:
    """
    Represents a tool call from a model response

    Attributes:
        id: Opaque call ID from the backend
        name: Tool name
        arguments: Parsed arguments dict
    """
    id: str
    name: str
    arguments: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}


@dataclass
class ToolResult:
    """
    Result of a tool execution

    Attributes:
        tool_call_id: ID of the tool call this result is for
        name: Tool name
        content: JSON-serialized result sent back to the model
        data: Structured result (or structured error)
        is_error: Whether execution failed
    """
    tool_call_id: str
    name: str
    content: str
    data: Any = None
    is_error: bool = False
