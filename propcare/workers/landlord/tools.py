"""
Landlord worker tools - approvals, spending, properties and settings.

Amounts shown to landlords are in pounds; storage stays in pence.
"""

import logging
from typing import Any, Dict, Optional

from ...constants import IssueStatus, Urgency
from ...models import Issue, WorkerContext, utcnow

logger = logging.getLogger(__name__)

_COMPLETED_STATES = (IssueStatus.COMPLETED.value, IssueStatus.RESOLVED_DIY.value)


def _pounds(pence: Optional[int]) -> float:
    return (pence or 0) / 100


def _landlord_id(args: Dict[str, Any], context: WorkerContext) -> str:
    """The landlord in context wins over the id the model passed."""
    requested = args.get("landlordId")
    if context.landlord is None:
        return requested
    if requested and requested != context.landlord.id:
        logger.warning(f"Landlord {context.landlord.id} asked for data of landlord {requested}")
    return context.landlord.id


async def _owned_issue(context: WorkerContext, issue_id: str) -> Optional[Issue]:
    """The issue, provided it belongs to the landlord in context."""
    issue = await context.store.get_issue(issue_id)
    if issue is None:
        return None
    if context.landlord is not None and issue.landlord_lead_id != context.landlord.id:
        logger.warning(f"Landlord {context.landlord.id} tried to access issue {issue_id}")
        return None
    return issue


# =============================================================================
# Approvals
# =============================================================================


async def get_pending_approvals(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = _landlord_id(args, context)
    issues = await context.store.list_issues(
        landlord_lead_id=landlord_id, statuses=[IssueStatus.REPORTED.value]
    )
    addresses = {p.id: p.address for p in await context.store.list_properties(landlord_id)}

    return {
        "count": len(issues),
        "issues": [
            {
                "id": i.id,
                "property": addresses.get(i.property_id, "Unknown"),
                "description": i.issue_description or "No description",
                "estimateLow": _pounds(i.price_estimate_low_pence),
                "estimateHigh": _pounds(i.price_estimate_high_pence),
                "urgency": i.urgency or Urgency.MEDIUM.value,
                "reportedAt": i.created_at,
            }
            for i in issues
        ],
    }


async def approve_issue(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    issue_id = args["issueId"]
    issue = await _owned_issue(context, issue_id)
    if issue is None:
        return {"success": False, "message": "Issue not found."}
    if not issue.is_open:
        return {"success": False, "message": f"Issue is already {issue.status}."}

    now = utcnow()
    updates: Dict[str, Any] = {
        "status": IssueStatus.APPROVED.value,
        "landlord_approved_at": now,
        "updated_at": now,
    }
    if args.get("notes"):
        updates["additional_notes"] = f"Landlord: {args['notes']}"

    try:
        await context.store.update_issue(issue_id, updates)
    except Exception as e:
        logger.error(f"Failed to approve issue {issue_id}: {e}", exc_info=True)
        return {"success": False, "message": "Failed to approve issue. Please try again."}

    logger.info(f"Issue {issue_id} approved by landlord")
    return {"success": True, "message": "Issue approved. Our team will schedule the job."}


async def reject_issue(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    issue_id = args["issueId"]
    issue = await _owned_issue(context, issue_id)
    if issue is None:
        return {"success": False, "message": "Issue not found."}
    if not issue.is_open:
        return {"success": False, "message": f"Issue is already {issue.status}."}

    now = utcnow()
    try:
        await context.store.update_issue(issue_id, {
            "status": IssueStatus.CANCELLED.value,
            "landlord_rejected_at": now,
            "landlord_rejection_reason": args["reason"],
            "updated_at": now,
        })
    except Exception as e:
        logger.error(f"Failed to reject issue {issue_id}: {e}", exc_info=True)
        return {"success": False, "message": "Failed to reject issue. Please try again."}

    logger.info(f"Issue {issue_id} rejected by landlord: {args['reason']}")
    return {"success": True, "message": "Issue rejected. The tenant will be notified."}


# =============================================================================
# Reporting
# =============================================================================


async def get_spending_summary(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = _landlord_id(args, context)
    settings = await context.store.get_landlord_settings(landlord_id)
    completed = await context.store.list_issues(
        landlord_lead_id=landlord_id, statuses=[IssueStatus.COMPLETED.value]
    )

    spend = settings.current_month_spend_pence if settings else 0
    budget = settings.monthly_budget_pence if settings else None

    return {
        "currentMonth": _pounds(spend),
        "budget": _pounds(budget) if budget else None,
        "percentUsed": spend / budget * 100 if budget else None,
        "completedJobs": len(completed),
    }


async def get_property_issues(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    status = args.get("status", "all")
    if status == "completed":
        statuses = list(_COMPLETED_STATES)
    elif status == "open":
        statuses = list(IssueStatus.open_states())
    else:
        statuses = None

    property_id = args["propertyId"]
    if context.landlord is not None:
        owned = {p.id for p in await context.store.list_properties(context.landlord.id)}
        if property_id not in owned:
            logger.warning(f"Landlord {context.landlord.id} tried to access property {property_id}")
            return {"count": 0, "issues": [], "message": "Property not found."}

    issues = await context.store.list_issues(property_id=property_id, statuses=statuses)
    return {
        "count": len(issues),
        "issues": [
            {
                "id": i.id,
                "status": i.status,
                "description": i.issue_description or "No description",
                "urgency": i.urgency or Urgency.MEDIUM.value,
                "createdAt": i.created_at,
            }
            for i in issues
        ],
    }


async def list_properties(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = _landlord_id(args, context)
    properties = await context.store.list_properties(landlord_id)
    open_issues = await context.store.list_issues(
        landlord_lead_id=landlord_id, statuses=IssueStatus.open_states()
    )

    counts: Dict[str, int] = {}
    for issue in open_issues:
        counts[issue.property_id] = counts.get(issue.property_id, 0) + 1

    return {
        "count": len(properties),
        "properties": [
            {
                "id": p.id,
                "address": p.address,
                "nickname": p.nickname,
                "openIssues": counts.get(p.id, 0),
            }
            for p in properties
        ],
    }


# =============================================================================
# Settings
# =============================================================================


async def update_settings(args: Dict[str, Any], context: WorkerContext) -> Dict[str, Any]:
    landlord_id = _landlord_id(args, context)

    updates: Dict[str, Any] = {}
    if args.get("autoApproveUnderPounds") is not None:
        updates["auto_approve_under_pence"] = round(args["autoApproveUnderPounds"] * 100)
    if args.get("monthlyBudgetPounds") is not None:
        updates["monthly_budget_pence"] = round(args["monthlyBudgetPounds"] * 100)
    if args.get("notifyOnAutoApprove") is not None:
        updates["notify_on_auto_approve"] = args["notifyOnAutoApprove"]

    if not updates:
        return {"success": False, "message": "No settings to update"}

    try:
        await context.store.update_landlord_settings(landlord_id, updates)
    except Exception as e:
        logger.error(f"Failed to update settings for {landlord_id}: {e}", exc_info=True)
        return {"success": False, "message": "Failed to update settings. Please try again."}

    logger.info(f"Landlord {landlord_id} settings updated: {sorted(updates)}")
    return {"success": True, "message": "Settings updated successfully", "newSettings": updates}
