"""
Dispatch Rule Evaluator - decide whether a job may go ahead without approval

Two ladders live here:

- evaluate(): the fixed ladder used when triage recommends an action.
  Safety rules (urgency, emergency category) are checked before any
  price/confidence gate, and those gates before the default.
- evaluate_landlord_rules(): the ladder driven by a landlord's own
  LandlordSettings (thresholds, category lists, monthly budget), used by
  the Dispatch worker before booking.

Both are pure apart from a log line on budget alerts.
"""

import logging
from typing import Any, Mapping, Optional, Tuple

from ..constants import DispatchAction, Urgency
from ..models import DispatchDecision, LandlordSettings, PriceEstimate

logger = logging.getLogger(__name__)

# Categories that auto-dispatch under the fixed ladder
AUTO_DISPATCH_CATEGORIES = frozenset({
    "plumbing_emergency",
    "electrical_emergency",
    "water_leak",
    "security",
})

# Emergency categories under landlord rules (heating included: no heating in winter)
EMERGENCY_CATEGORIES = AUTO_DISPATCH_CATEGORIES | {"heating"}

# Categories that are typically safe to auto-dispatch without explicit config
SAFE_AUTO_CATEGORIES = frozenset({
    "plumbing",
    "heating",
    "locksmith",
    "security",
    "water_leak",
})

MIN_CONFIDENCE = 60
HIGH_CONFIDENCE = 70
MAX_AUTO_MID_PENCE = 15000
APPROVAL_MID_PENCE = 30000


def default_landlord_settings(landlord_lead_id: str = "") -> LandlordSettings:
    """Settings applied when a landlord has not configured any."""
    return LandlordSettings(landlord_lead_id=landlord_lead_id)


def _pounds(pence: int) -> str:
    return f"£{pence / 100:.0f}"


def _issue_fields(issue: Any) -> Tuple[Optional[str], Optional[str]]:
    """(category, urgency) from an Issue or a plain mapping."""
    if issue is None:
        return None, None
    if isinstance(issue, Mapping):
        category = issue.get("issue_category") or issue.get("category")
        return category, issue.get("urgency")
    return getattr(issue, "issue_category", None), getattr(issue, "urgency", None)


def evaluate(
    issue: Any,
    estimate: PriceEstimate,
    settings: Optional[LandlordSettings] = None,
) -> DispatchDecision:
    """
    Decide auto_dispatch vs request_approval, first match wins.

    ``settings`` is accepted so callers can pass the same arguments to
    either ladder; this one does not consult it.
    """
    category, urgency = _issue_fields(issue)
    mid = estimate.mid_price_pence
    confidence = estimate.confidence

    if urgency == Urgency.EMERGENCY.value:
        return DispatchDecision(
            action=DispatchAction.AUTO_DISPATCH.value,
            reason="Emergency issue - auto-dispatched for tenant safety",
            urgency_override=True,
        )

    if category in AUTO_DISPATCH_CATEGORIES:
        return DispatchDecision(
            action=DispatchAction.AUTO_DISPATCH.value,
            reason=f"Emergency category ({category}) - auto-dispatched for safety",
            urgency_override=True,
        )

    if confidence < MIN_CONFIDENCE or mid > APPROVAL_MID_PENCE:
        if confidence < MIN_CONFIDENCE:
            reason = f"Low estimate confidence ({confidence}%) - landlord approval needed"
        else:
            reason = f"Estimated price {_pounds(mid)} is above {_pounds(APPROVAL_MID_PENCE)} - landlord approval needed"
        return DispatchDecision(action=DispatchAction.REQUEST_APPROVAL.value, reason=reason)

    if mid <= MAX_AUTO_MID_PENCE and confidence >= HIGH_CONFIDENCE:
        return DispatchDecision(
            action=DispatchAction.AUTO_DISPATCH.value,
            reason=f"Under {_pounds(MAX_AUTO_MID_PENCE)} with {confidence}% confidence",
        )

    return DispatchDecision(
        action=DispatchAction.REQUEST_APPROVAL.value,
        reason="Default policy - requesting landlord approval",
    )


def evaluate_landlord_rules(
    issue: Any,
    estimate: PriceEstimate,
    settings: Optional[LandlordSettings] = None,
) -> DispatchDecision:
    """
    Evaluate a landlord's configured dispatch rules.

    Decision flow:
    1. Emergency urgency - auto-dispatch (or escalate when the landlord
       disabled emergency auto-dispatch)
    2. Emergency category - auto-dispatch when emergency auto-dispatch is on
    3. Category that always requires approval
    4. Price above the approval threshold
    5. Monthly budget would be exceeded
    6. Under the auto-approve threshold and in the auto-approve list
    7. Safe category, high confidence and under the threshold
    8. Default - request approval
    """
    rules = settings or default_landlord_settings()
    category, urgency = _issue_fields(issue)
    price = estimate.mid_price_pence

    if urgency == Urgency.EMERGENCY.value:
        if rules.emergency_auto_dispatch:
            return DispatchDecision(
                action=DispatchAction.AUTO_DISPATCH.value,
                reason="Emergency issue - auto-dispatched for tenant safety",
                urgency_override=True,
            )
        return DispatchDecision(
            action=DispatchAction.ESCALATE_ADMIN.value,
            reason="Emergency issue - landlord has disabled emergency auto-dispatch",
            urgency_override=True,
        )

    if category in EMERGENCY_CATEGORIES and rules.emergency_auto_dispatch:
        return DispatchDecision(
            action=DispatchAction.AUTO_DISPATCH.value,
            reason=f"Emergency category ({category}) - auto-dispatched for safety",
            urgency_override=True,
        )

    if category and category in (rules.always_require_approval_categories or []):
        return DispatchDecision(
            action=DispatchAction.REQUEST_APPROVAL.value,
            reason=f'Category "{category}" always requires landlord approval',
        )

    if rules.require_approval_above_pence and price > rules.require_approval_above_pence:
        return DispatchDecision(
            action=DispatchAction.REQUEST_APPROVAL.value,
            reason=(
                f"Estimated price {_pounds(price)} exceeds approval threshold "
                f"{_pounds(rules.require_approval_above_pence)}"
            ),
        )

    if rules.monthly_budget_pence:
        projected = (rules.current_month_spend_pence or 0) + price

        if projected > rules.monthly_budget_pence:
            return DispatchDecision(
                action=DispatchAction.REQUEST_APPROVAL.value,
                reason=(
                    f"Would exceed monthly budget "
                    f"({_pounds(projected)} / {_pounds(rules.monthly_budget_pence)})"
                ),
            )

        usage_percent = projected / rules.monthly_budget_pence * 100
        if usage_percent >= (rules.budget_alert_threshold or 80):
            logger.warning(
                f"Budget alert for landlord {rules.landlord_lead_id}: "
                f"{usage_percent:.0f}% of monthly budget used"
            )

    under_threshold = bool(rules.auto_approve_under_pence) and price <= rules.auto_approve_under_pence

    if under_threshold and category in (rules.auto_approve_categories or []):
        return DispatchDecision(
            action=DispatchAction.AUTO_DISPATCH.value,
            reason=f'Under {_pounds(rules.auto_approve_under_pence)} threshold + approved category "{category}"',
            notify_landlord=rules.notify_on_auto_approve,
        )

    if under_threshold and category in SAFE_AUTO_CATEGORIES and estimate.confidence >= HIGH_CONFIDENCE:
        return DispatchDecision(
            action=DispatchAction.AUTO_DISPATCH.value,
            reason=f'Safe category "{category}" under threshold with high confidence',
            notify_landlord=rules.notify_on_auto_approve,
        )

    return DispatchDecision(
        action=DispatchAction.REQUEST_APPROVAL.value,
        reason="Default policy - requesting landlord approval",
    )
