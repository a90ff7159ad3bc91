"""
TriageWorker - Categorises reported issues and prices them for dispatch.
"""

from ...constants import ISSUE_CATEGORIES, DispatchAction, WorkerType
from ...llm.base import ChatOptions
from ...tools.models import ToolDefinition
from ..base import BaseWorker
from ..common import URGENCY_VALUES
from .tools import (
    categorize_and_price,
    search_similar_skus,
    calculate_complexity,
    ready_for_dispatch,
)

TRIAGE_SYSTEM_PROMPT = f"""\
You are a property maintenance triage specialist.
Your job is to categorize tenant issues, estimate pricing, and prepare for dispatch decisions.

## Your goals
1. Categorize - determine the type of work needed
2. Estimate - calculate a price range based on similar jobs
3. Assess risk - identify any safety or complexity concerns
4. Recommend - suggest whether to auto-dispatch or request approval

## Categories
{", ".join(ISSUE_CATEGORIES)}

## Urgency levels
- low: can wait days or weeks (cosmetic)
- medium: should be fixed within 1-2 weeks
- high: affecting daily life, fix within days
- emergency: safety issue, as soon as possible

## Pricing guidelines
- Simple fix (tap washer, door handle): £50-100
- Medium job (tap replacement, lock repair): £100-200
- Complex job (boiler repair, pipe work): £200-400
- Major work (bathroom leak, heating system): £400+

Always use the SKU database for accurate pricing when available.
When triage is done, record category and urgency with update_issue_state
(status "reported"), call ready_for_dispatch, then hand off to DISPATCH_WORKER.
"""


class TriageWorker(BaseWorker):
    """Categorises and prices issues ahead of the dispatch decision."""

    name = WorkerType.TRIAGE
    system_prompt = TRIAGE_SYSTEM_PROMPT
    chat_options = ChatOptions(temperature=0.3, max_tokens=512)

    domain_tools = [
        ToolDefinition(
            name="categorize_and_price",
            description="Categorize an issue and estimate its price",
            parameters={
                "type": "object",
                "properties": {
                    "description": {"type": "string", "description": "Description of the issue"},
                    "category": {"type": "string", "description": "Issue category"},
                    "urgency": {"type": "string", "enum": URGENCY_VALUES, "description": "Urgency level"},
                },
                "required": ["description"],
            },
            executor=categorize_and_price,
        ),
        ToolDefinition(
            name="search_similar_skus",
            description="Search for similar jobs in the SKU database to get accurate pricing",
            parameters={
                "type": "object",
                "properties": {
                    "keywords": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Keywords to search for",
                    },
                },
                "required": ["keywords"],
            },
            executor=search_similar_skus,
        ),
        ToolDefinition(
            name="calculate_complexity",
            description="Assess job complexity based on details",
            parameters={
                "type": "object",
                "properties": {
                    "factors": {
                        "type": "object",
                        "properties": {
                            "multipleTradeSkills": {"type": "boolean"},
                            "specialEquipment": {"type": "boolean"},
                            "accessDifficulty": {"type": "boolean"},
                            "partsRequired": {"type": "boolean"},
                            "estimatedHours": {"type": "number"},
                        },
                    },
                },
                "required": ["factors"],
            },
            executor=calculate_complexity,
        ),
        ToolDefinition(
            name="ready_for_dispatch",
            description="Triage complete, ready for dispatch decision",
            parameters={
                "type": "object",
                "properties": {
                    "category": {"type": "string"},
                    "urgency": {"type": "string"},
                    "estimate": {
                        "type": "object",
                        "properties": {
                            "lowPricePence": {"type": "number"},
                            "highPricePence": {"type": "number"},
                            "midPricePence": {"type": "number"},
                            "confidence": {"type": "number"},
                        },
                    },
                    "recommendation": {"type": "string", "enum": [a.value for a in DispatchAction]},
                    "notes": {"type": "string"},
                },
                "required": ["category", "urgency", "estimate", "recommendation"],
            },
            executor=ready_for_dispatch,
        ),
    ]
