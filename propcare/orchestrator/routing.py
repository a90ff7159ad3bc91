"""Entry routing - which worker handles a new inbound message."""

from typing import Optional

from ..constants import IssueStatus, SenderType, WorkerType
from ..models import Issue


def select_worker(sender_type: SenderType, issue: Optional[Issue] = None) -> WorkerType:
    """
    Pick the first worker for a turn.

    Landlords always get the Landlord worker. For tenants, an issue waiting
    on details that already has a description, photos and availability goes
    to Triage, a reported issue goes to Dispatch, and anything else stays
    with the Tenant worker.
    """
    if sender_type == SenderType.LANDLORD:
        return WorkerType.LANDLORD

    if issue is not None:
        if issue.status == IssueStatus.AWAITING_DETAILS.value and issue.has_triage_details:
            return WorkerType.TRIAGE
        if issue.status == IssueStatus.REPORTED.value:
            return WorkerType.DISPATCH

    return WorkerType.TENANT
