"""
PropCare Workers - Specialised language-model-backed workers

- TenantWorker: troubleshooting and detail gathering with tenants
- TriageWorker: categorisation and pricing
- DispatchWorker: landlord rules, booking and approval requests
- LandlordWorker: approvals, spending and settings for landlords

The Inspector worker type is declared but has no implementation.
"""

from typing import Dict

from ..constants import WorkerType
from ..llm.base import BaseLLMClient
from .base import BaseWorker, map_state_updates
from .common import COMMON_TOOLS
from .tenant import TenantWorker
from .triage import TriageWorker
from .dispatch import DispatchWorker
from .landlord import LandlordWorker


def build_default_workers(llm_client: BaseLLMClient) -> Dict[WorkerType, BaseWorker]:
    """One instance of every implemented worker, keyed by type."""
    workers = [
        TenantWorker(llm_client),
        TriageWorker(llm_client),
        DispatchWorker(llm_client),
        LandlordWorker(llm_client),
    ]
    return {w.name: w for w in workers}


__all__ = [
    "BaseWorker",
    "COMMON_TOOLS",
    "map_state_updates",
    "TenantWorker",
    "TriageWorker",
    "DispatchWorker",
    "LandlordWorker",
    "build_default_workers",
]
