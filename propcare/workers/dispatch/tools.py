"""
Dispatch worker tools - landlord rules, booking and landlord messaging.
"""

import logging
import time
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ...models import Lead, LandlordSettings, PriceEstimate, WorkerContext, utcnow
from ...rules.dispatch import default_landlord_settings, evaluate_landlord_rules

logger = logging.getLogger(__name__)

NOTIFY_METHOD = "whatsapp"
DAILY_SLOTS = ["09:00-12:00", "13:00-17:00"]
SLOT_DAYS = 5

# Days from today before the first offered slot
_URGENCY_OFFSET = {"today": 0, "tomorrow": 1, "this_week": 2}
_DEFAULT_OFFSET = 3


# ===== Shared Helpers =====


async def _load_rules(context: WorkerContext, landlord_id: str) -> Optional[LandlordSettings]:
    if context is None or context.store is None:
        return None
    try:
        return await context.store.get_landlord_settings(landlord_id)
    except Exception as e:
        logger.error(f"Failed to load landlord rules for {landlord_id}: {e}", exc_info=True)
        return None


def _landlord_for(context: WorkerContext, landlord_id: str) -> Optional[Lead]:
    """The landlord in context, if it is the one being addressed."""
    landlord = context.landlord if context else None
    if landlord is not None and landlord.id == landlord_id:
        return landlord
    return None


async def _send_to_landlord(context: WorkerContext, landlord_id: str, body: str) -> bool:
    landlord = _landlord_for(context, landlord_id)
    if landlord is None:
        logger.warning(f"No contact details for landlord {landlord_id}, message not sent")
        return False
    if context.notifier is None:
        logger.warning("No notifier configured, landlord message not sent")
        return False
    return await context.notifier.send_message(landlord.phone, body)


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while True:
        number, rem = divmod(number, 36)
        out = digits[rem] + out
        if number == 0:
            return out


# ===== Rules =====


async def get_landlord_rules(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    settings = await _load_rules(context, args["landlordId"])
    if settings is None:
        return {
            "configured": False,
            "settings": default_landlord_settings(args["landlordId"]).to_dict(),
        }
    return {"configured": True, "settings": settings.to_dict()}


async def evaluate_dispatch(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = args["landlordId"]
    mid = args["estimateMidPence"]

    settings = await _load_rules(context, landlord_id) or default_landlord_settings(landlord_id)
    estimate = PriceEstimate(
        low_price_pence=round(args.get("estimateLowPence") or mid * 0.8),
        high_price_pence=round(args.get("estimateHighPence") or mid * 1.2),
        mid_price_pence=round(mid),
        confidence=round(args.get("confidence") or 70),
    )
    issue = {"issue_category": args["issueCategory"], "urgency": args["urgency"]}

    decision = evaluate_landlord_rules(issue, estimate, settings)
    logger.info(f"Dispatch decision for landlord {landlord_id}: {decision.action} ({decision.reason})")

    return {
        "decision": decision.to_dict(),
        "rules": {
            "autoApproveUnder": settings.auto_approve_under_pence,
            "requireApprovalAbove": settings.require_approval_above_pence,
            "autoApproveCategories": settings.auto_approve_categories,
            "monthlyBudget": settings.monthly_budget_pence,
            "currentSpend": settings.current_month_spend_pence,
        },
    }


# ===== Scheduling =====


def available_slots(urgency: Optional[str], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Slots over five consecutive days from the urgency offset, Sundays skipped."""
    today = today or date.today()
    offset = _URGENCY_OFFSET.get(urgency or "", _DEFAULT_OFFSET)

    days = []
    for i in range(offset, offset + SLOT_DAYS):
        day = today + timedelta(days=i)
        if day.weekday() == 6:
            continue
        days.append({
            "date": day.isoformat(),
            "dayName": day.strftime("%A"),
            "slots": list(DAILY_SLOTS),
        })
    return days


async def check_availability(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    slots = available_slots(args.get("urgency"))
    return {
        "available": True,
        "slots": slots,
        "nextAvailable": slots[0]["date"] if slots else None,
    }


async def book_job(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    reference = f"JOB-{_base36(int(time.time() * 1000)).upper()}"
    logger.info(
        f"Booking job {reference} on {args['date']} {args['slot']}"
        f"{' (emergency)' if args.get('isEmergency') else ''}"
    )
    return {"booked": True, "date": args["date"], "slot": args["slot"], "reference": reference}


# ===== Landlord messaging =====


async def request_landlord_approval(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = args["landlordId"]
    body = (
        f"Approval needed: {args['summary']}\n"
        f"Estimate: £{args['estimateLow']:.0f} - £{args['estimateHigh']:.0f}\n"
        f"Reason: {args['reason']}\n\n"
        "Reply APPROVE or REJECT."
    )
    sent = await _send_to_landlord(context, landlord_id, body)

    issue_id = args.get("issueId") or (context.current_issue.id if context.current_issue else None)
    if sent and issue_id and context.store is not None:
        await context.store.update_issue(issue_id, {"landlord_notified_at": utcnow()})

    return {
        "sent": sent,
        "method": NOTIFY_METHOD,
        "landlordId": landlord_id,
        "awaitingApproval": True,
    }


async def notify_landlord(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    sent = await _send_to_landlord(context, args["landlordId"], args["message"])
    return {"sent": sent, "method": NOTIFY_METHOD, "type": args["type"]}


async def update_budget_spend(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = args["landlordId"]
    amount = round(args["amountPence"])
    total = await context.store.increment_month_spend(landlord_id, amount)
    logger.info(f"Budget spend for {landlord_id}: +£{amount / 100:.2f} (now £{total / 100:.2f})")
    return {"updated": True, "currentMonthSpendPence": total}
