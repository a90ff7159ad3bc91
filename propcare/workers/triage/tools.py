"""
Triage worker tools - categorisation, pricing and complexity scoring.
"""

import logging
from typing import Any, Dict

from ...constants import WorkerType
from ...models import WorkerContext
from ...rules.dispatch import evaluate
from ...rules.pricing import CATALOG_SEARCH_LIMIT, estimate_price
from ...rules.triage import assess_urgency, categorize_issue

logger = logging.getLogger(__name__)


async def categorize_and_price(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    description = args["description"]
    category = args.get("category") or categorize_issue(description)
    urgency = args.get("urgency") or assess_urgency(description, category)

    store = context.store if context else None
    estimate = await estimate_price(description, category, store)
    decision = evaluate({"issue_category": category, "urgency": urgency}, estimate)

    return {
        "category": category,
        "urgency": urgency,
        "estimate": estimate.to_dict(),
        "recommendedAction": decision.action,
    }


async def search_similar_skus(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    keywords = [k for k in args["keywords"] if k]
    if not keywords or context is None or context.store is None:
        return {"matches": [], "found": False}

    try:
        services = await context.store.search_services(keywords, limit=CATALOG_SEARCH_LIMIT)
    except Exception as e:
        logger.error(f"SKU search failed: {e}", exc_info=True)
        return {"matches": [], "found": False}

    matches = [
        {"name": s.name, "pricePence": s.price_pence, "category": s.category or "general"}
        for s in services
    ]
    return {"matches": matches, "found": bool(matches)}


# Risk points per complexity factor
_COMPLEXITY_WEIGHTS = {
    "multipleTradeSkills": 2,
    "specialEquipment": 1,
    "accessDifficulty": 1,
    "partsRequired": 1,
}
_LONG_JOB_HOURS = 4


def score_complexity(factors: Dict[str, Any]) -> Dict[str, Any]:
    risk_score = sum(weight for key, weight in _COMPLEXITY_WEIGHTS.items() if factors.get(key))
    if (factors.get("estimatedHours") or 0) > _LONG_JOB_HOURS:
        risk_score += 2

    if risk_score >= 4:
        complexity = "complex"
    elif risk_score >= 2:
        complexity = "medium"
    else:
        complexity = "simple"

    return {"complexity": complexity, "riskScore": risk_score, "factors": factors}


async def calculate_complexity(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    return score_complexity(args["factors"])


async def ready_for_dispatch(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    logger.info(
        f"Triage complete: {args['category']} / {args['urgency']} -> {args['recommendation']}"
    )
    return {"handoff": WorkerType.DISPATCH.value, "triageResult": args}
