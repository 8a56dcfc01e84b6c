"""Request models for API endpoints."""
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field


class HistoryMessage(BaseModel):
    """Earlier user or assistant text turn."""

    role: str = Field(..., pattern="^(user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    """Request model for the assistant chat endpoint."""

    message: str = Field(..., description="User message", min_length=1)
    history: List[HistoryMessage] = Field(
        default_factory=list,
        description="Previous turns of the conversation, oldest first",
    )
    provider: Optional[str] = Field(
        default=None,
        description="LLM provider: 'claude' or 'ollama'. Defaults to settings.llm_provider",
        pattern="^(claude|ollama)$",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "message": "Any yoga classes this week in Shoreditch?",
                "history": [],
            }
        }


class ToolCallRequest(BaseModel):
    """Request model for running a single assistant tool."""

    arguments: Dict[str, Any] = Field(
        default_factory=dict, description="Tool arguments matching its input schema"
    )

    class Config:
        json_schema_extra = {
            "example": {"arguments": {"category": "Yoga", "tierLevel": "basic"}}
        }
