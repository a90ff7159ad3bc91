from .worker import TenantWorker

__all__ = ["TenantWorker"]
