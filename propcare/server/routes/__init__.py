"""Route registration for the PropCare API."""

from fastapi import FastAPI

from .messages import router as messages_router


def register_routes(app: FastAPI):
    app.include_router(messages_router)
