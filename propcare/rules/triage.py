"""
Keyword rules for categorising issues and assessing urgency.

Both functions are deterministic and side-effect free; they back the
Tenant worker's ``assess_issue`` tool and the Triage worker's
``categorize_and_price`` tool when the model does not supply its own
category or urgency.
"""

import re
from typing import Optional

from ..constants import Urgency
from ..models import LandlordSettings

# Categories treated as emergencies regardless of wording
EMERGENCY_CATEGORIES = frozenset({
    "plumbing_emergency",
    "electrical_emergency",
    "water_leak",
    "security",
    "heating",  # no heating in winter
})

EMERGENCY_KEYWORDS = (
    "gas smell", "gas leak", "no heating", "no hot water", "flooding",
    "burst pipe", "water everywhere", "electrical fire", "sparks",
    "locked out", "break in", "broken lock", "security", "unsafe",
    "ceiling collapse", "structural", "danger", "emergency", "urgent",
)

HIGH_KEYWORDS = (
    "leak", "dripping", "no water", "toilet broken", "shower broken",
    "boiler not working", "fridge broken", "freezer broken", "pest",
    "mice", "rats", "cockroach", "bed bugs", "affecting daily",
)

_LOW_URGENCY_CATEGORIES = frozenset({"cosmetic", "upgrade", "garden"})


def _has(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None


def assess_urgency(description: str, category: Optional[str] = None) -> str:
    """
    Determine the urgency tier from the description and category.

    Emergency keywords win, then emergency categories, then high-urgency
    keywords; otherwise the category decides (low for cosmetic work,
    medium for everything else).
    """
    text = (description or "").lower()

    for keyword in EMERGENCY_KEYWORDS:
        if keyword in text:
            return Urgency.EMERGENCY.value

    if category and category in EMERGENCY_CATEGORIES:
        return Urgency.EMERGENCY.value

    for keyword in HIGH_KEYWORDS:
        if keyword in text:
            return Urgency.HIGH.value

    if category in _LOW_URGENCY_CATEGORIES:
        return Urgency.LOW.value

    return Urgency.MEDIUM.value


def categorize_issue(description: str) -> str:
    """Determine the issue category from the description (first rule that matches)."""
    text = (description or "").lower()

    if _has(r"tap|sink|drain|pipe|leak|water|toilet|shower|bath|plumb", text):
        if _has(r"burst|flood|water everywhere|emergency", text):
            return "plumbing_emergency"
        return "plumbing"

    if _has(r"electric|socket|switch|light|fuse|power|outlet|wiring", text):
        if _has(r"sparks|fire|burning|smell|smoke|emergency", text):
            return "electrical_emergency"
        return "electrical"

    if _has(r"heating|boiler|radiator|thermostat|hot water|no heat|cold", text):
        return "heating"

    if _has(r"lock|door|window|break|secure|key|alarm", text):
        if _has(r"locked out|break in|broken lock", text):
            return "security"
        return "locksmith"

    if _has(r"door|window|cupboard|drawer|shelf|wood|cabinet|hinge", text):
        return "carpentry"

    if _has(r"fridge|freezer|oven|hob|dishwasher|washing machine|dryer|appliance", text):
        return "appliance"

    if _has(r"pest|mouse|mice|rat|cockroach|bed bug|ant|wasp|bee", text):
        return "pest_control"

    if _has(r"paint|crack|chip|scratch|stain|mark|cosmetic|look", text):
        return "cosmetic"

    if _has(r"garden|lawn|hedge|tree|plant|fence|gate|outdoor", text):
        return "garden"

    if _has(r"clean|mould|mold|damp|smell|dirty", text):
        return "cleaning"

    return "general"


def calculate_new_monthly_spend(settings: LandlordSettings, amount_pence: int) -> int:
    """Running month spend after adding ``amount_pence``."""
    return (settings.current_month_spend_pence or 0) + amount_pence
