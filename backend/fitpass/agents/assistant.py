"""Conversational booking assistant running a bounded tool-calling loop."""
from typing import Callable, Dict, Any, List, Optional

from ..config import settings
from ..models import (
    AssistantReply,
    ChatMessage,
    Role,
    ToolCall,
    ToolInvocation,
    ToolResult,
)
from ..services.exceptions import FitPassError
from ..services.llm_provider import LLMProvider, get_chat_provider
from ..services.sanity_client import SanityClient
from ..utils.logger import logger
from .tools import run_tool, tool_specs

FALLBACK_ANSWER = (
    "Sorry, I couldn't finish looking that up. Please try asking again in a moment."
)

# Tools whose clerkId argument is always taken from the signed-in session
USER_SCOPED_TOOLS = {"getUserBookings"}


def build_system_prompt(user_id: Optional[str] = None) -> str:
    """System prompt for the assistant, carrying the caller's Clerk id if known."""
    prompt = f"""You are the {settings.site_name} assistant, helping members discover and book fitness classes.

Guidelines:
- Use the tools to look up classes, sessions, venues, categories, pricing and bookings
- Only describe classes, times and venues that the tools returned
- Mention available spots and the venue when listing sessions
- If a class requires a higher tier than the user has, say which tier unlocks it
- Keep answers short and friendly; use lists for more than two items
- Don't make up information not present in tool results"""

    if user_id:
        prompt += f"\n\nThe signed-in user's clerkId is: {user_id}"
    else:
        prompt += "\n\nThe user is not signed in; ask them to sign in to see their bookings."
    return prompt


class AssistantAgent:
    """Agent that answers a user message, calling tools as the model asks."""

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        client_factory: Callable[[], SanityClient] = SanityClient,
        max_steps: Optional[int] = None,
    ):
        """Initialize the assistant.

        Args:
            provider: LLM provider. Defaults to get_chat_provider()
            client_factory: Builds the Sanity client tools query through
            max_steps: Maximum model round trips per answer
        """
        self.provider = provider or get_chat_provider()
        self.client_factory = client_factory
        self.max_steps = max_steps or settings.max_agent_steps

    def _bind_user(self, call: ToolCall, user_id: Optional[str]) -> Dict[str, Any]:
        arguments = dict(call.arguments)
        if call.name in USER_SCOPED_TOOLS:
            arguments["clerkId"] = user_id
        return arguments

    async def _run_call(
        self, call: ToolCall, user_id: Optional[str], client: SanityClient
    ) -> tuple[ToolResult, ToolInvocation]:
        arguments = self._bind_user(call, user_id)
        try:
            content = await run_tool(call.name, arguments, client)
            is_error = False
        except FitPassError as e:
            logger.warning(f"[ASSISTANT] Tool {call.name} failed: {e}")
            content = {"error": str(e)}
            is_error = True

        invocation = ToolInvocation(
            name=call.name,
            # Never echo the bound user id back to callers
            arguments={k: v for k, v in call.arguments.items() if k != "clerkId"},
            count=content.get("count") if isinstance(content.get("count"), int) else None,
            error=content.get("error"),
        )
        result = ToolResult(
            tool_call_id=call.id, name=call.name, content=content, is_error=is_error
        )
        return result, invocation

    async def respond(
        self,
        message: str,
        history: Optional[List[ChatMessage]] = None,
        user_id: Optional[str] = None,
    ) -> AssistantReply:
        """Answer ``message`` given the earlier conversation.

        Args:
            message: New user message
            history: Earlier turns, oldest first
            user_id: Clerk id of the signed-in user, if any

        Returns:
            Final answer and the tools that were run to produce it
        """
        messages = list(history or []) + [ChatMessage(role=Role.USER, content=message)]
        system = build_system_prompt(user_id)
        specs = tool_specs()
        invocations: List[ToolInvocation] = []
        last_text = ""

        logger.info(f"[ASSISTANT] Answering with {self.provider.get_name()}")

        async with self.client_factory() as client:
            for step in range(1, self.max_steps + 1):
                response = await self.provider.chat(
                    messages, system=system, tools=specs, max_tokens=settings.max_tokens
                )
                if response.text:
                    last_text = response.text

                if not response.tool_calls:
                    return AssistantReply(
                        answer=response.text or FALLBACK_ANSWER,
                        tool_invocations=invocations,
                        steps=step,
                    )

                messages.append(
                    ChatMessage(
                        role=Role.ASSISTANT,
                        content=response.text,
                        tool_calls=response.tool_calls,
                    )
                )

                results = []
                for call in response.tool_calls:
                    result, invocation = await self._run_call(call, user_id, client)
                    results.append(result)
                    invocations.append(invocation)

                messages.append(ChatMessage(role=Role.TOOL, tool_results=results))

        logger.warning(f"[ASSISTANT] Stopped after {self.max_steps} steps")
        return AssistantReply(
            answer=last_text or FALLBACK_ANSWER,
            tool_invocations=invocations,
            steps=self.max_steps,
        )
