"""
Chatbot route.
"""
from fastapi import APIRouter, Depends
from mindcare.api.dependencies import get_chat_relay
from mindcare.schemas.chat import ChatRequest, ChatResponse
from mindcare.services.chat_service import ChatRelay

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(request: ChatRequest, relay: ChatRelay = Depends(get_chat_relay)):
    """Relay a message to the AI assistant. No storage is held during the call."""
    reply = await relay.relay(request.message)
    return ChatResponse(reply=reply)
