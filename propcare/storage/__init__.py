"""
PropCare Storage - MaintenanceStore contract and implementations
"""

from .base import MaintenanceStore, ensure_conversation
from .memory import InMemoryStore
from .postgres import PostgresStore

__all__ = ["MaintenanceStore", "ensure_conversation", "InMemoryStore", "PostgresStore"]
