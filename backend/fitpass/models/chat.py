"""Provider-neutral chat data models."""
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Chat message author."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Output of a tool invocation, sent back to the model."""

    tool_call_id: str
    name: str
    content: Dict[str, Any]
    is_error: bool = False


class ChatMessage(BaseModel):
    """One turn of a conversation."""

    role: Role
    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tool_results: List[ToolResult] = Field(default_factory=list)


class LLMResponse(BaseModel):
    """Normalised reply from an LLM provider."""

    text: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    stop_reason: Optional[str] = None


class ToolInvocation(BaseModel):
    """Record of a tool the assistant ran while answering."""

    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    count: Optional[int] = None
    error: Optional[str] = None


class AssistantReply(BaseModel):
    """Final answer of one assistant turn."""

    answer: str
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)
    steps: int = 0
