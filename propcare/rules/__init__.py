"""
PropCare Rules - Deterministic business rules

- dispatch: auto-dispatch vs approval decisions
- pricing: catalog-first price estimates
- triage: keyword categorisation and urgency
"""

from .dispatch import evaluate, evaluate_landlord_rules, default_landlord_settings
from .pricing import estimate_price, CATEGORY_PRICING
from .triage import assess_urgency, categorize_issue, calculate_new_monthly_spend

__all__ = [
    "evaluate",
    "evaluate_landlord_rules",
    "default_landlord_settings",
    "estimate_price",
    "CATEGORY_PRICING",
    "assess_urgency",
    "categorize_issue",
    "calculate_new_monthly_spend",
]
