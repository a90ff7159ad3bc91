"""FastAPI app creation and API key check."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Security
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "PROPCARE_API_KEY"

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(
    request: Request,
    api_key_header_value: Optional[str] = Security(_api_key_header),
):
    """Accept Authorization: Bearer <key> or X-API-Key when a key is configured."""
    expected = request.app.state.api_key
    if expected is None:
        return

    provided = api_key_header_value
    if not provided:
        auth = request.headers.get("authorization", "")
        if auth.lower().startswith("bearer "):
            provided = auth[7:].strip()

    if provided != expected:
        raise HTTPException(401, "Invalid or missing API key")


def create_app(propcare, api_key: Optional[str] = None) -> FastAPI:
    """
    Create the FastAPI app around an application object.

    ``propcare`` needs async ``initialize()``, ``handle_message()`` and
    ``shutdown()``; PropCareApp provides all three. ``api_key`` defaults to
    $PROPCARE_API_KEY; when neither is set the API is unauthenticated.
    """

    @asynccontextmanager
    async def lifespan(_api: FastAPI):
        await propcare.initialize()
        try:
            yield
        finally:
            await propcare.shutdown()

    api = FastAPI(title="PropCare", version="0.1.0", lifespan=lifespan)
    api.state.propcare = propcare
    api.state.api_key = api_key if api_key is not None else os.getenv(API_KEY_ENV_VAR)

    if api.state.api_key is None:
        logger.warning(
            f"{API_KEY_ENV_VAR} is not set. API endpoints are unauthenticated."
        )

    from .routes import register_routes
    register_routes(api)
    return api
