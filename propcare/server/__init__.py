"""HTTP entry point for PropCare."""

from .app import create_app

__all__ = ["create_app"]
