"""Gradio chat frontend for the FitPass booking assistant - single process."""
import os
import sys
from typing import Optional

import gradio as gr
from dotenv import load_dotenv

load_dotenv()

# Import backend services directly (no API round trip)
from fitpass.agents import AssistantAgent
from fitpass.config import settings
from fitpass.models import ChatMessage, Role
from fitpass.services import ClerkClient, get_chat_provider
from fitpass.services.exceptions import AuthenticationError

custom_css = """
/* Global theme colors */
.gradio-container {
    background-color: #0B1220 !important;
}

h1 {
    color: #F5F5F5 !important;
    text-align: center !important;
}

.question-row {
    align-items: flex-end !important;
}
"""

EXAMPLES = [
    {"text": "What kinds of classes do you offer?"},
    {"text": "Find me a yoga class this week"},
    {"text": "Which studios are in London?"},
    {"text": "What does the Performance tier include?"},
    {"text": "Recommend something for cardio, about 45 minutes"},
    {"text": "What classes have I booked?"},
]


async def resolve_user_id(session_token: Optional[str]) -> Optional[str]:
    """Verify a pasted Clerk session token and return the user id."""
    if not session_token or not session_token.strip():
        return None
    try:
        async with ClerkClient() as clerk:
            claims = await clerk.verify_session_token(session_token.strip())
        return claims["sub"]
    except AuthenticationError as e:
        print(f"[CHAT] Session token rejected: {e}")
        return None


async def chat_fn(message: str, history, llm_provider: str = "claude", session_token: str = ""):
    """Answer with the booking assistant (Claude or Ollama)."""
    history = history or []
    if not message or not message.strip():
        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": "Please enter a question."})
        return history

    earlier = [
        ChatMessage(role=Role(turn["role"]), content=str(turn["content"]))
        for turn in history
        if turn.get("role") in ("user", "assistant")
    ]

    try:
        user_id = await resolve_user_id(session_token)
        assistant = AssistantAgent(provider=get_chat_provider(llm_provider))
        print(f"[CHAT] Answering with {assistant.provider.get_name()} (signed in: {bool(user_id)})")
        reply = await assistant.respond(message, history=earlier, user_id=user_id)
        answer = reply.answer
        for invocation in reply.tool_invocations:
            print(f"[CHAT] Tool {invocation.name} -> {invocation.error or invocation.count}")
    except Exception as e:
        print(f"[CHAT] FAILED: {e}")
        answer = f"Error talking to the assistant: {e}"

    history.append({"role": "user", "content": message})
    history.append({"role": "assistant", "content": answer})
    return history


async def handle_example_click(evt: gr.SelectData, history, llm_provider: str = "claude", session_token: str = ""):
    """Handle when user clicks an example question."""
    example_text = evt.value.get("text", "")
    return await chat_fn(example_text, history, llm_provider, session_token)


# Build Gradio interface
with gr.Blocks(title=f"{settings.site_name} Assistant") as demo:
    gr.HTML(f"<style>{custom_css}</style>")

    gr.HTML(f"<h1>{settings.site_name} <span style='color: #C6603F;'>Assistant</span></h1>")
    gr.Markdown("Find classes, venues and your bookings, powered by Claude/Ollama")

    with gr.Row():
        llm_provider_radio = gr.Radio(
            choices=["claude", "ollama"],
            value=settings.llm_provider,
            label="LLM Provider",
            scale=1,
        )
        session_token_input = gr.Textbox(
            label="Clerk session token (optional, for your bookings)",
            type="password",
            scale=3,
        )

    chatbot = gr.Chatbot(
        label="Booking Assistant",
        height=450,
        examples=EXAMPLES,
    )

    with gr.Row(elem_classes="question-row"):
        msg_input = gr.Textbox(
            label="Your Question",
            placeholder="Ask about classes, venues, pricing or your bookings...",
            scale=4,
        )
        send_btn = gr.Button("Send", scale=1, variant="primary")

    clear_btn = gr.Button("Clear Chat")

    chat_inputs = [msg_input, chatbot, llm_provider_radio, session_token_input]

    msg_input.submit(fn=chat_fn, inputs=chat_inputs, outputs=[chatbot]).then(
        fn=lambda: "", outputs=[msg_input]
    )
    send_btn.click(fn=chat_fn, inputs=chat_inputs, outputs=[chatbot]).then(
        fn=lambda: "", outputs=[msg_input]
    )
    clear_btn.click(fn=lambda: None, outputs=[chatbot])

    chatbot.example_select(
        fn=handle_example_click,
        inputs=[chatbot, llm_provider_radio, session_token_input],
        outputs=[chatbot],
    )


def validate_environment():
    """Check required environment variables before starting."""
    if not settings.sanity_configured:
        print("[ERROR] SANITY_PROJECT_ID environment variable must be set")
        sys.exit(1)
    print(f"[STARTUP] Sanity project: {settings.sanity_project_id}/{settings.sanity_dataset}")

    if settings.anthropic_api_key.strip():
        print("[STARTUP] ANTHROPIC_API_KEY is set")
    else:
        print("[STARTUP] ANTHROPIC_API_KEY not set (Claude provider will not work)")

    print(f"[STARTUP] OLLAMA_HOST: {settings.ollama_host}")

    if not settings.clerk_secret_key:
        print("[STARTUP] CLERK_SECRET_KEY not set (signed-in bookings lookup disabled)")


if __name__ == "__main__":
    validate_environment()

    print("[STARTUP] Starting single-process Gradio app...")
    demo.queue()
    demo.launch(
        server_port=int(os.getenv("GRADIO_SERVER_PORT", 7860)),
        server_name="0.0.0.0",
        share=False
    )
