"""Inbound message and health routes."""

from fastapi import APIRouter, Depends, Request

from ..app import verify_api_key
from ..models import MessageRequest, MessageResponse

router = APIRouter()


@router.post("/messages", response_model=MessageResponse, dependencies=[Depends(verify_api_key)])
async def receive_message(req: MessageRequest, request: Request):
    app = request.app.state.propcare
    response = await app.handle_message(req.to_incoming())
    return MessageResponse(**response.to_dict())


@router.get("/health")
async def health():
    return {"status": "ok"}
