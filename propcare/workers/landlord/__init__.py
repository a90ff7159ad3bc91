from .worker import LandlordWorker

__all__ = ["LandlordWorker"]
