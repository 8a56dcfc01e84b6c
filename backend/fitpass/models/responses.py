"""Response models for API endpoints."""
from typing import Dict, Any, List

from pydantic import BaseModel, Field

from .chat import ToolInvocation


class ChatResponse(BaseModel):
    """Response model for the assistant chat endpoint."""

    answer: str = Field(..., description="Assistant answer")
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)
    provider: str = Field(..., description="LLM provider that produced the answer")

    class Config:
        json_schema_extra = {
            "example": {
                "answer": "There are 3 Vinyasa Yoga sessions this week...",
                "tool_invocations": [
                    {"name": "getClassSessions", "arguments": {"className": "yoga"}, "count": 3}
                ],
                "provider": "Claude (claude-sonnet-4-20250514)",
            }
        }


class ToolSpec(BaseModel):
    """Description of one assistant tool."""

    name: str
    description: str
    input_schema: Dict[str, Any]


class ToolListResponse(BaseModel):
    """Response model for listing tools."""

    tools: List[ToolSpec]
    total: int = Field(..., description="Number of registered tools")
