"""Agents for the application."""
from .assistant import AssistantAgent, build_system_prompt
from .tools import Tool, ai_tools, get_tool, run_tool, tool_specs

__all__ = [
    "AssistantAgent",
    "build_system_prompt",
    "Tool",
    "ai_tools",
    "get_tool",
    "run_tool",
    "tool_specs",
]
