"""
PropCare Tool Executor - Execute tool calls and drive the tool calling loop

Two entry points:
- execute_tool_call(): run one call against a registry, always returning a
  ToolResult (unknown tools, invalid arguments and handler failures become
  structured error results)
- run_conversation_turn(): ask the backend, execute every requested call in
  request order, feed results back, and repeat until the model answers
  without tool calls or the iteration ceiling is hit
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import ValidationError

from ..constants import DEFAULT_MAX_TOOL_ITERATIONS, MAX_ITERATIONS_FALLBACK
from ..llm.base import BaseLLMClient, ChatOptions, Usage
from ..models import ToolInvocation
from .models import ToolCall, ToolResult
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Outcome of one conversation turn"""
    response: str
    tool_results: List[ToolInvocation] = field(default_factory=list)
    iterations: int = 0
    usage: Usage = field(default_factory=Usage)
    messages: List[Dict[str, Any]] = field(default_factory=list)
    """Full message list as sent on the last backend call, plus any trailing tool results."""
    completed: bool = True
    """False when the fallback reply was returned instead of a model answer."""


def _serialize(result: Any) -> str:
    return json.dumps(result, ensure_ascii=False, default=str)


def _error_result(tool_call: ToolCall, message: str) -> ToolResult:
    data = {"error": message}
    return ToolResult(
        tool_call_id=tool_call.id,
        name=tool_call.name,
        content=_serialize(data),
        data=data,
        is_error=True,
    )


async def execute_tool_call(
    tool_call: ToolCall,
    registry: ToolRegistry,
    context: Any = None,
) -> ToolResult:
    """
    Execute a single tool call.

    Never raises: an unknown tool, arguments failing the tool's JSON schema,
    and an exception inside the handler all come back as an error ToolResult
    so the conversation loop can continue.

    Args:
        tool_call: The call requested by the model
        registry: Tools available for this turn
        context: Passed to the handler as its second argument

    Returns:
        ToolResult with JSON content and structured data
    """
    tool = registry.get_tool(tool_call.name)
    if tool is None or tool.executor is None:
        logger.warning(f"Unknown tool requested: {tool_call.name}")
        return _error_result(tool_call, f"Unknown tool: {tool_call.name}")

    arguments = tool_call.arguments
    if not isinstance(arguments, dict):
        return _error_result(tool_call, f"Invalid arguments for {tool_call.name}: expected an object")

    try:
        jsonschema.validate(arguments, tool.parameters)
    except ValidationError as e:
        logger.warning(f"Tool '{tool_call.name}' rejected arguments: {e.message}")
        return _error_result(tool_call, f"Invalid arguments for {tool_call.name}: {e.message}")

    try:
        result = await tool.executor(arguments, context)
    except Exception as e:
        logger.error(f"Tool '{tool_call.name}' execution failed: {e}", exc_info=True)
        return _error_result(tool_call, str(e) or e.__class__.__name__)

    return ToolResult(
        tool_call_id=tool_call.id,
        name=tool_call.name,
        content=_serialize(result),
        data=json.loads(_serialize(result)),
    )


def _assistant_message(content: str, tool_calls: List[ToolCall]) -> Dict[str, Any]:
    return {
        "role": "assistant",
        "content": content or "",
        "tool_calls": [tc.to_dict() for tc in tool_calls],
    }


def _tool_message(result: ToolResult) -> Dict[str, Any]:
    return {
        "role": "tool",
        "tool_call_id": result.tool_call_id,
        "name": result.name,
        "content": result.content,
    }


async def run_conversation_turn(
    llm_client: BaseLLMClient,
    messages: List[Dict[str, Any]],
    registry: ToolRegistry,
    context: Any = None,
    options: Optional[ChatOptions] = None,
    max_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS,
) -> TurnResult:
    """
    Run one conversation turn with automatic tool execution.

    Makes at most ``max_iterations`` backend calls. Tool calls from one
    backend response are executed sequentially in the order requested, and
    their result messages are appended in that same order.

    Returns:
        TurnResult. When the ceiling is reached (or the backend call itself
        fails) the response is the fixed fallback apology and tool_results
        holds whatever was accumulated.
    """
    current = list(messages)
    tool_results: List[ToolInvocation] = []
    usage = Usage()
    tools = registry.get_tools() or None

    iterations = 0
    while iterations < max_iterations:
        logger.debug(f"Tool loop iteration {iterations + 1}/{max_iterations}")

        try:
            response = await llm_client.chat(current, tools, options)
        except Exception as e:
            logger.error(f"Backend call failed on iteration {iterations + 1}: {e}", exc_info=True)
            return TurnResult(
                response=MAX_ITERATIONS_FALLBACK,
                tool_results=tool_results,
                iterations=iterations,
                usage=usage,
                messages=current,
                completed=False,
            )

        if response.usage:
            usage.prompt_tokens += response.usage.prompt_tokens
            usage.completion_tokens += response.usage.completion_tokens

        if not response.tool_calls:
            return TurnResult(
                response=response.content or "",
                tool_results=tool_results,
                iterations=iterations + 1,
                usage=usage,
                messages=current,
            )

        current.append(_assistant_message(response.content, response.tool_calls))

        for tool_call in response.tool_calls:
            result = await execute_tool_call(tool_call, registry, context)
            tool_results.append(ToolInvocation(
                tool=tool_call.name,
                args=tool_call.arguments if isinstance(tool_call.arguments, dict) else {},
                result=result.data,
                is_error=result.is_error,
            ))
            current.append(_tool_message(result))
            logger.info(f"Tool '{tool_call.name}' executed: {'error' if result.is_error else 'success'}")

        iterations += 1

    logger.warning(f"Max tool iterations ({max_iterations}) reached without a final answer")
    return TurnResult(
        response=MAX_ITERATIONS_FALLBACK,
        tool_results=tool_results,
        iterations=iterations,
        usage=usage,
        messages=current,
        completed=False,
    )
