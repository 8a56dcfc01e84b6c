"""Data models for the application."""
from .catalog import TierLevel, BookingsFilter, FitnessGoal
from .chat import (
    Role,
    ToolCall,
    ToolResult,
    ChatMessage,
    LLMResponse,
    ToolInvocation,
    AssistantReply,
)
from .profile import LocationData, ProfilePreferences, ProfileResult, UserPreferences
from .requests import ChatRequest, HistoryMessage, ToolCallRequest
from .responses import ChatResponse, ToolSpec, ToolListResponse

__all__ = [
    "TierLevel",
    "BookingsFilter",
    "FitnessGoal",
    "Role",
    "ToolCall",
    "ToolResult",
    "ChatMessage",
    "LLMResponse",
    "ToolInvocation",
    "AssistantReply",
    "LocationData",
    "ProfilePreferences",
    "ProfileResult",
    "UserPreferences",
    "ChatRequest",
    "HistoryMessage",
    "ToolCallRequest",
    "ChatResponse",
    "ToolSpec",
    "ToolListResponse",
]
