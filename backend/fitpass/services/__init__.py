"""Services for the application."""
from .sanity_client import SanityClient, Patch
from .clerk_client import ClerkClient
from .profile_service import ProfileService, profile_service
from .llm_provider import LLMProvider, ClaudeProvider, OllamaProvider, get_chat_provider

__all__ = [
    "SanityClient",
    "Patch",
    "ClerkClient",
    "ProfileService",
    "profile_service",
    "LLMProvider",
    "ClaudeProvider",
    "OllamaProvider",
    "get_chat_provider",
]
