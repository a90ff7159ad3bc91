from .worker import TriageWorker

__all__ = ["TriageWorker"]
