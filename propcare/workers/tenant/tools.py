"""
Tenant worker tools - troubleshooting, DIY advice and detail gathering.

Executors return plain dicts; the tool executor serialises them for the
model. The troubleshooting service is optional; without it the tools
report that the issue should be escalated.
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional

from ...constants import IssueStatus, Urgency, WorkerType
from ...models import WorkerContext
from ...rules.triage import assess_urgency, categorize_issue

logger = logging.getLogger(__name__)


# =============================================================================
# Troubleshooting
# =============================================================================

_NO_FLOW = {
    "success": False,
    "message": "No troubleshooting flow available for this issue type",
    "shouldEscalate": True,
}


async def start_troubleshooting(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    category = args["issueCategory"]
    description = args["issueDescription"]
    service = context.troubleshooting if context else None

    if service is None:
        logger.info("Troubleshooting requested but no service is configured")
        return dict(_NO_FLOW)

    flow_id = service.select_flow(category, description)
    if not flow_id:
        return dict(_NO_FLOW)

    if context.current_issue:
        issue_id = context.current_issue.id
    else:
        issue_id = f"temp_{int(time.time() * 1000)}"

    logger.info(f"Starting troubleshooting flow {flow_id} for issue {issue_id}")
    result = await service.start_session(issue_id, flow_id, description)
    return {"success": True, **result.to_dict()}


async def continue_troubleshooting(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    service = context.troubleshooting if context else None
    if service is None:
        return dict(_NO_FLOW)

    result = await service.process_response(args["sessionId"], args["tenantResponse"])
    return {"success": True, **result.to_dict()}


# =============================================================================
# DIY advice
# =============================================================================

# Never suggest DIY when the description mentions any of these
UNSAFE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"gas", r"electric", r"spark", r"smoke", r"fire", r"flood",
        r"burst", r"structural", r"ceiling.*(collapse|fall)", r"unsafe",
    )
]


def _advice(steps: List[str], tools: List[str], warning: Optional[str] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {"canDIY": True, "steps": steps, "toolsNeeded": tools}
    if warning:
        result["warning"] = warning
    return result


def get_diy_advice_for(issue_type: str, description: str) -> Dict[str, Any]:
    """Safe DIY steps for common household issues, or a professional referral."""
    desc = (description or "").lower()
    kind = (issue_type or "").lower()

    if any(p.search(desc) for p in UNSAFE_PATTERNS):
        return {
            "canDIY": False,
            "steps": [],
            "warning": "This requires a professional. Do not attempt to fix this yourself.",
        }

    if "tap" in kind or "drip" in kind or "dripping" in desc:
        return _advice(
            [
                "First, turn off the water supply under the sink",
                "Wait a minute, then turn it back on",
                "If still dripping, the washer inside may need replacing",
                "For a quick temporary fix, try tightening the tap handle",
            ],
            ["Adjustable wrench (optional)"],
        )

    if "drain" in kind or "block" in kind or "slow drain" in desc:
        return _advice(
            [
                "Try pouring boiling water down the drain",
                "If that doesn't work, use a plunger over the drain",
                "Create a seal and pump up and down firmly",
                "You can also try a mixture of baking soda and vinegar",
            ],
            ["Plunger", "Boiling water"],
            "Never use chemical drain cleaners with other products",
        )

    if "toilet" in kind and "running" in desc:
        return _advice(
            [
                "Lift the cistern lid and check the float",
                "The float should rise with water level and stop the fill",
                "Try gently lifting the float arm - if water stops, adjust the float lower",
                "Check the flapper valve at the bottom isn't stuck open",
            ],
            [],
        )

    if "door" in kind and ("squeak" in desc or "creak" in desc):
        return _advice(
            [
                "Spray WD-40 or any household oil on the hinges",
                "Open and close the door several times to work it in",
                "Wipe off any excess oil",
            ],
            ["WD-40 or cooking oil"],
        )

    if "radiator" in kind and "cold" in desc:
        return _advice(
            [
                "The radiator may need bleeding (releasing trapped air)",
                "Turn off your heating first",
                "Use a radiator key to open the bleed valve at the top",
                "Hold a cloth underneath to catch drips",
                "When water comes out steadily, close the valve",
            ],
            ["Radiator key (or flat screwdriver for some models)", "Cloth"],
            "If multiple radiators are cold, the boiler may need checking",
        )

    if "bulb" in kind or "light" in desc:
        return _advice(
            [
                "Make sure the light switch is OFF",
                "Wait for the bulb to cool if it was recently on",
                "Unscrew the old bulb and check the wattage",
                "Screw in a new bulb of the same type and wattage",
            ],
            ["Replacement bulb"],
            "If the new bulb doesn't work, it may be a wiring issue - call us",
        )

    return {
        "canDIY": False,
        "steps": [],
        "warning": "This looks like it needs a professional to assess properly.",
    }


async def get_diy_advice(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    return get_diy_advice_for(args["issueType"], args["description"])


# =============================================================================
# Assessment and detail gathering
# =============================================================================

_SAFETY_URGENCIES = (Urgency.EMERGENCY.value, Urgency.HIGH.value)
_NO_DIY_CATEGORIES = ("plumbing_emergency", "electrical_emergency", "security", "heating")


async def assess_issue(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    description = args["description"]
    category = categorize_issue(description)
    urgency = assess_urgency(description, category)
    return {
        "category": category,
        "urgency": urgency,
        "isSafetyIssue": urgency in _SAFETY_URGENCIES,
        "suggestDIY": urgency not in _SAFETY_URGENCIES and category not in _NO_DIY_CATEGORIES,
    }


async def request_photos(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    logger.info(f"Requesting photos: {args['reason']}")
    return {"requested": True, "message": "Photo request logged"}


async def request_availability(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    logger.info(f"Requesting availability: {args['urgency']}")
    return {"requested": True, "urgency": args["urgency"]}


async def mark_resolved_diy(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    logger.info(f"Issue resolved by tenant: {args['resolution']}")
    return {"status": IssueStatus.RESOLVED_DIY.value, "resolution": args["resolution"]}


async def ready_for_triage(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    logger.info(f"Ready for triage: {args['summary']}")
    return {
        "handoff": WorkerType.TRIAGE.value,
        "reason": "Details gathered, need pricing and categorization",
    }
