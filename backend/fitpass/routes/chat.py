"""Assistant chat routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..agents import AssistantAgent
from ..models import ChatMessage, ChatRequest, ChatResponse, Role
from ..services import get_chat_provider
from ..utils.logger import logger
from .deps import get_current_user_id

router = APIRouter(prefix="/api/chat", tags=["chat"])


def build_assistant(provider: Optional[str] = None) -> AssistantAgent:
    """Build the assistant for the requested LLM provider."""
    return AssistantAgent(provider=get_chat_provider(provider))


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
) -> ChatResponse:
    """Answer a message with the booking assistant.

    Args:
        request: Message and earlier conversation turns

    Returns:
        The assistant's answer and the tools it ran
    """
    try:
        logger.info(f"Processing chat message ({len(request.history)} earlier turns)")
        assistant = build_assistant(request.provider)
        history = [
            ChatMessage(role=Role(turn.role), content=turn.content)
            for turn in request.history
        ]
        reply = await assistant.respond(request.message, history=history, user_id=user_id)

        return ChatResponse(
            answer=reply.answer,
            tool_invocations=reply.tool_invocations,
            provider=assistant.provider.get_name(),
        )

    except Exception as e:
        logger.error(f"Chat failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to answer message: {str(e)}")
