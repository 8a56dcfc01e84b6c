"""Application configuration management."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Anthropic API Configuration
    anthropic_api_key: str = ""  # Required - set via ANTHROPIC_API_KEY env var
    anthropic_model: str = "claude-sonnet-4-20250514"

    # Ollama Configuration
    ollama_host: str = "http://localhost:11434"  # Local Ollama by default
    ollama_api_key: str = ""  # Only needed for Ollama Cloud
    ollama_model: str = "qwen3:8b"

    # LLM Provider Selection ("claude" or "ollama")
    llm_provider: str = "claude"

    # Assistant Configuration
    max_agent_steps: int = 5
    max_tokens: int = 1024

    # Sanity Configuration
    sanity_project_id: str = ""
    sanity_dataset: str = "production"
    sanity_api_version: str = "2024-10-01"
    sanity_use_cdn: bool = False
    sanity_read_token: str = ""
    sanity_write_token: str = ""  # Required for profile writes

    # Clerk Configuration
    clerk_secret_key: str = ""
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_jwks_url: str = ""  # Defaults to {clerk_api_url}/jwks
    clerk_authorized_parties: List[str] = []

    # Site Configuration
    site_name: str = "FitPass"
    site_url: str = "https://fitnesspass.vercel.app"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    default_timeout: int = 30
    cors_origins: List[str] = []  # Defaults to [site_url]

    # Model Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def sanity_configured(self) -> bool:
        """Whether a Sanity project has been configured."""
        return bool(self.sanity_project_id and self.sanity_dataset)

    @property
    def resolved_clerk_jwks_url(self) -> str:
        """Get the JWKS endpoint used to verify session tokens."""
        return self.clerk_jwks_url or f"{self.clerk_api_url.rstrip('/')}/jwks"

    @property
    def allowed_origins(self) -> List[str]:
        """Get the origins allowed to make cross-site (credentialed) requests."""
        return self.cors_origins or [self.site_url.rstrip("/")]


# Global settings instance
settings = Settings()
