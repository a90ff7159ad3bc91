from .worker import DispatchWorker

__all__ = ["DispatchWorker"]
