"""
Pydantic schemas for the chatbot.
"""
from pydantic import BaseModel
from typing import Optional


class ChatRequest(BaseModel):
    message: Optional[str] = None


class ChatResponse(BaseModel):
    success: bool = True
    reply: str
