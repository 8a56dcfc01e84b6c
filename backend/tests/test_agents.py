"""Tests for agents."""
import pytest
from unittest.mock import AsyncMock, Mock

from fakes import FakeSanityClient
from fitpass.agents.assistant import FALLBACK_ANSWER, AssistantAgent, build_system_prompt
from fitpass.models import ChatMessage, LLMResponse, Role, ToolCall
from fitpass.services.exceptions import SanityError
from fitpass.services.llm_provider import ClaudeProvider, OllamaProvider


def make_provider(*responses):
    """Create a provider double returning the given responses in order."""
    provider = Mock()
    provider.chat = AsyncMock(side_effect=list(responses))
    provider.get_name = Mock(return_value="Fake (test)")
    return provider


class TestSystemPrompt:
    """Tests for the assistant system prompt."""

    def test_signed_in_prompt_carries_clerk_id(self):
        """Test that the signed-in user's clerk id is in the prompt."""
        assert "user_123" in build_system_prompt("user_123")

    def test_signed_out_prompt(self):
        """Test that signed-out users are asked to sign in."""
        assert "not signed in" in build_system_prompt(None)


class TestAssistantAgent:
    """Tests for AssistantAgent."""

    @pytest.mark.asyncio
    async def test_answer_without_tools(self):
        """Test a plain answer ends the loop after one step."""
        provider = make_provider(LLMResponse(text="Hi! How can I help?"))
        agent = AssistantAgent(provider=provider, client_factory=FakeSanityClient)

        reply = await agent.respond("hello")

        assert reply.answer == "Hi! How can I help?"
        assert reply.steps == 1
        assert reply.tool_invocations == []
        messages = provider.chat.await_args.args[0]
        assert messages == [ChatMessage(role=Role.USER, content="hello")]
        assert [t["name"] for t in provider.chat.await_args.kwargs["tools"]][0] == "searchClasses"

    @pytest.mark.asyncio
    async def test_tool_round_trip(self):
        """Test that tool calls are run and their results fed back."""
        categories = [{"_id": "c1", "name": "Yoga"}]
        client = FakeSanityClient(fetch_result=categories)
        provider = make_provider(
            LLMResponse(tool_calls=[ToolCall(id="call-1", name="getCategories")]),
            LLMResponse(text="We offer Yoga."),
        )
        agent = AssistantAgent(provider=provider, client_factory=lambda: client)

        reply = await agent.respond("What classes are there?")

        assert reply.answer == "We offer Yoga."
        assert reply.steps == 2
        assert reply.tool_invocations[0].name == "getCategories"
        assert reply.tool_invocations[0].count == 1

        second_messages = provider.chat.await_args_list[1].args[0]
        assert second_messages[1].role == Role.ASSISTANT
        assert second_messages[1].tool_calls[0].id == "call-1"
        tool_message = second_messages[2]
        assert tool_message.role == Role.TOOL
        assert tool_message.tool_results[0].tool_call_id == "call-1"
        assert tool_message.tool_results[0].content == {"count": 1, "categories": categories}

    @pytest.mark.asyncio
    async def test_bookings_bound_to_signed_in_user(self):
        """Test that the bookings tool always uses the session's user id."""
        client = FakeSanityClient(fetch_result=[])
        provider = make_provider(
            LLMResponse(tool_calls=[
                ToolCall(id="call-1", name="getUserBookings", arguments={"clerkId": "someone_else"})
            ]),
            LLMResponse(text="You have no upcoming bookings."),
        )
        agent = AssistantAgent(provider=provider, client_factory=lambda: client)

        reply = await agent.respond("What have I booked?", user_id="user_123")

        assert client.fetch.await_args.args[1] == {"clerkId": "user_123"}
        assert reply.tool_invocations[0].arguments == {}

    @pytest.mark.asyncio
    async def test_bookings_signed_out(self):
        """Test that signed-out users get the auth error from the bookings tool."""
        client = FakeSanityClient(fetch_result=[])
        provider = make_provider(
            LLMResponse(tool_calls=[
                ToolCall(id="call-1", name="getUserBookings", arguments={"clerkId": "user_123"})
            ]),
            LLMResponse(text="Please sign in first."),
        )
        agent = AssistantAgent(provider=provider, client_factory=lambda: client)

        reply = await agent.respond("What have I booked?")

        client.fetch.assert_not_called()
        assert reply.tool_invocations[0].error == "User not authenticated"

    @pytest.mark.asyncio
    async def test_tool_errors_returned_to_model(self):
        """Test that tool failures become error results instead of aborting."""
        client = FakeSanityClient()
        client.fetch.side_effect = SanityError("HTTP 500", status_code=500)
        provider = make_provider(
            LLMResponse(tool_calls=[
                ToolCall(id="call-1", name="searchVenues", arguments={}),
                ToolCall(id="call-2", name="bookClass", arguments={}),
            ]),
            LLMResponse(text="I couldn't reach the venue list."),
        )
        agent = AssistantAgent(provider=provider, client_factory=lambda: client)

        reply = await agent.respond("Venues?")

        assert reply.answer == "I couldn't reach the venue list."
        results = provider.chat.await_args_list[1].args[0][-1].tool_results
        assert [r.is_error for r in results] == [True, True]
        assert "Unknown tool" in results[1].content["error"]
        assert reply.tool_invocations[1].error == "Unknown tool: bookClass"

    @pytest.mark.asyncio
    async def test_step_limit(self):
        """Test that the loop stops after max_steps rounds."""
        looping = LLMResponse(
            text="Let me check.",
            tool_calls=[ToolCall(id="call", name="getSubscriptionInfo")],
        )
        provider = make_provider(looping, looping)
        agent = AssistantAgent(provider=provider, client_factory=FakeSanityClient, max_steps=2)

        reply = await agent.respond("Prices?")

        assert provider.chat.await_count == 2
        assert reply.steps == 2
        assert reply.answer == "Let me check."
        assert len(reply.tool_invocations) == 2

    @pytest.mark.asyncio
    async def test_empty_answer_falls_back(self):
        """Test that an empty final answer is replaced by the fallback."""
        provider = make_provider(LLMResponse(text=""))
        agent = AssistantAgent(provider=provider, client_factory=FakeSanityClient)

        reply = await agent.respond("?")
        assert reply.answer == FALLBACK_ANSWER


class TestClaudeProvider:
    """Tests for ClaudeProvider message conversion."""

    @pytest.mark.asyncio
    async def test_tool_use_parsed(self):
        """Test that tool_use blocks become ToolCalls."""
        response = Mock()
        response.content = [
            Mock(type="text", text="Looking that up."),
            Mock(type="tool_use", id="toolu_1", input={"className": "yoga"}),
        ]
        response.content[1].name = "getClassSessions"
        response.stop_reason = "tool_use"

        client = Mock()
        client.messages.create = AsyncMock(return_value=response)
        provider = ClaudeProvider(model="claude-test", client=client)

        result = await provider.chat(
            [ChatMessage(role=Role.USER, content="yoga?")],
            system="sys",
            tools=[{"name": "getClassSessions", "description": "d", "input_schema": {}}],
        )

        assert result.text == "Looking that up."
        assert result.tool_calls == [
            ToolCall(id="toolu_1", name="getClassSessions", arguments={"className": "yoga"})
        ]
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"] == [{"role": "user", "content": "yoga?"}]

    def test_tool_messages_converted(self):
        """Test assistant tool calls and tool results in Anthropic format."""
        from fitpass.models import ToolResult

        assistant = ChatMessage(
            role=Role.ASSISTANT,
            tool_calls=[ToolCall(id="toolu_1", name="getCategories", arguments={})],
        )
        tool = ChatMessage(
            role=Role.TOOL,
            tool_results=[ToolResult(tool_call_id="toolu_1", name="getCategories", content={"count": 0})],
        )

        assert ClaudeProvider._to_anthropic(assistant) == {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "toolu_1", "name": "getCategories", "input": {}}],
        }
        converted = ClaudeProvider._to_anthropic(tool)
        assert converted["role"] == "user"
        assert converted["content"][0]["type"] == "tool_result"
        assert converted["content"][0]["tool_use_id"] == "toolu_1"
        assert converted["content"][0]["content"] == '{"count": 0}'


class TestOllamaProvider:
    """Tests for OllamaProvider message conversion."""

    def test_tool_results_become_tool_messages(self):
        """Test that each tool result is its own tool-role message."""
        from fitpass.models import ToolResult

        tool = ChatMessage(
            role=Role.TOOL,
            tool_results=[
                ToolResult(tool_call_id="a", name="getCategories", content={"count": 0}),
                ToolResult(tool_call_id="b", name="searchVenues", content={"count": 1}),
            ],
        )
        converted = OllamaProvider._to_ollama(tool)

        assert [m["role"] for m in converted] == ["tool", "tool"]
        assert converted[1]["tool_name"] == "searchVenues"
