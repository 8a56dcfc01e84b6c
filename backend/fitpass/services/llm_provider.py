"""LLM Provider abstraction for Claude and Ollama tool-calling chat."""
import json
import uuid
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

import anthropic
import ollama

from ..config import settings
from ..models import ChatMessage, LLMResponse, Role, ToolCall
from ..utils.logger import logger


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def chat(
        self,
        messages: List[ChatMessage],
        system: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Send a chat completion request that may call tools.

        Args:
            messages: Conversation so far, oldest first
            system: Optional system prompt
            tools: Tool specs (name, description, input_schema)
            max_tokens: Maximum tokens to generate

        Returns:
            Normalised response with text and any requested tool calls
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return provider name for logging."""
        pass


class ClaudeProvider(LLMProvider):
    """Claude API provider."""

    def __init__(self, model: Optional[str] = None, client: Optional[anthropic.AsyncAnthropic] = None):
        """Initialize Claude provider.

        Args:
            model: Model name to use. Defaults to settings.anthropic_model
            client: Optional preconfigured Anthropic client
        """
        self.model = model or settings.anthropic_model
        self.client = client or anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    @staticmethod
    def _to_anthropic(message: ChatMessage) -> Dict[str, Any]:
        if message.role == Role.TOOL:
            return {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": result.tool_call_id,
                        "content": json.dumps(result.content, default=str),
                        "is_error": result.is_error,
                    }
                    for result in message.tool_results
                ],
            }

        if message.role == Role.ASSISTANT and message.tool_calls:
            blocks: List[Dict[str, Any]] = []
            if message.content:
                blocks.append({"type": "text", "text": message.content})
            blocks.extend(
                {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                for call in message.tool_calls
            )
            return {"role": "assistant", "content": blocks}

        return {"role": message.role.value, "content": message.content}

    async def chat(
        self,
        messages: List[ChatMessage],
        system: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        logger.info(f"[LLM] Calling Claude {self.model}...")
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=system or "",
                messages=[self._to_anthropic(m) for m in messages],
                tools=tools or [],
            )
        except Exception as e:
            logger.error(f"[LLM] Claude {self.model} failed: {e}")
            raise

        text_parts = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {})))

        logger.info(f"[LLM] Claude {self.model} responded ({len(tool_calls)} tool calls)")
        return LLMResponse(
            text="\n".join(text_parts).strip(),
            tool_calls=tool_calls,
            stop_reason=response.stop_reason,
        )

    def get_name(self) -> str:
        """Return provider name for logging."""
        return f"Claude ({self.model})"


class OllamaProvider(LLMProvider):
    """Ollama API provider (local or cloud)."""

    def __init__(self, model: Optional[str] = None, host: Optional[str] = None):
        """Initialize Ollama provider.

        Args:
            model: Model name to use. Defaults to settings.ollama_model
            host: Ollama server host (defaults to settings.ollama_host)
        """
        self.model = model or settings.ollama_model
        self.host = host or settings.ollama_host

        if self.host == "https://ollama.com":
            # Cloud mode - requires API key
            if not settings.ollama_api_key:
                raise ValueError("OLLAMA_API_KEY required for Ollama Cloud")
            self.client = ollama.AsyncClient(
                host=self.host,
                headers={"Authorization": f"Bearer {settings.ollama_api_key}"}
            )
            logger.info("[LLM] Initialized Ollama Cloud client")
        else:
            self.client = ollama.AsyncClient(host=self.host)
            logger.info(f"[LLM] Initialized Ollama local client at {self.host}")

    @staticmethod
    def _to_ollama(message: ChatMessage) -> List[Dict[str, Any]]:
        if message.role == Role.TOOL:
            return [
                {
                    "role": "tool",
                    "tool_name": result.name,
                    "content": json.dumps(result.content, default=str),
                }
                for result in message.tool_results
            ]

        converted: Dict[str, Any] = {"role": message.role.value, "content": message.content}
        if message.tool_calls:
            converted["tool_calls"] = [
                {"function": {"name": call.name, "arguments": call.arguments}}
                for call in message.tool_calls
            ]
        return [converted]

    async def chat(
        self,
        messages: List[ChatMessage],
        system: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        logger.info(f"[LLM] Calling Ollama {self.model} at {self.host}...")

        payload: List[Dict[str, Any]] = []
        if system:
            payload.append({"role": "system", "content": system})
        for message in messages:
            payload.extend(self._to_ollama(message))

        ollama_tools = [
            {
                "type": "function",
                "function": {
                    "name": spec["name"],
                    "description": spec["description"],
                    "parameters": spec["input_schema"],
                },
            }
            for spec in tools or []
        ]

        try:
            response = await self.client.chat(
                model=self.model,
                messages=payload,
                tools=ollama_tools or None,
                options={"num_predict": max_tokens},
            )
        except Exception as e:
            logger.error(f"[LLM] Ollama {self.model} failed: {e}")
            raise

        tool_calls = [
            ToolCall(
                id=f"call_{uuid.uuid4().hex[:12]}",
                name=call.function.name,
                arguments=dict(call.function.arguments or {}),
            )
            for call in response.message.tool_calls or []
        ]

        logger.info(f"[LLM] Ollama {self.model} responded ({len(tool_calls)} tool calls)")
        return LLMResponse(
            text=(response.message.content or "").strip(),
            tool_calls=tool_calls,
            stop_reason=response.done_reason,
        )

    def get_name(self) -> str:
        """Return provider name for logging."""
        return f"Ollama ({self.model})"


def get_chat_provider(provider_type: Optional[str] = None) -> LLMProvider:
    """Get the LLM provider driving the assistant.

    Args:
        provider_type: "claude" or "ollama". Defaults to settings.llm_provider

    Returns:
        LLM provider instance
    """
    if (provider_type or settings.llm_provider) == "ollama":
        return OllamaProvider()
    return ClaudeProvider()
