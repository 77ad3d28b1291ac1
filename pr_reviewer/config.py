"""
Configuration management.

Settings are read from the environment once at process entry and handed to
the components that need them; nothing in the package reads a global copy.
When running as a GitHub Action, the action inputs arrive as INPUT_<NAME>
variables and are accepted as aliases.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str) -> AliasChoices:
    return AliasChoices(name, f"input_{name}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub
    github_token: str = Field(..., validation_alias=_env("github_token"))
    github_api_url: str = "https://api.github.com"
    github_event_path: Optional[str] = None
    github_event_name: str = ""

    # OpenAI
    openai_api_key: str = Field("", validation_alias=_env("openai_api_key"))
    openai_api_model: str = Field("gpt-4", validation_alias=_env("openai_api_model"))
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_deployment: Optional[str] = None

    # Review behaviour
    prompt: str = Field("", validation_alias=_env("prompt"))
    exclude: str = Field("", validation_alias=_env("exclude"))

    # Generation parameters
    llm_temperature: float = 0.2
    llm_max_tokens: int = 700
    llm_top_p: float = 1.0
    llm_timeout_seconds: float = 60.0

    # Application
    http_timeout_seconds: float = 30.0
    max_workers: int = Field(1, ge=1)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def check_llm_credentials(self) -> "Settings":
        if not (self.openai_api_key or self.uses_azure_openai):
            raise ValueError(
                "openai_api_key is required unless azure_openai_endpoint and azure_openai_api_key are set"
            )
        return self

    @property
    def exclude_patterns(self) -> List[str]:
        """Exclusion globs from the comma-separated ``exclude`` value."""
        return [pattern.strip() for pattern in self.exclude.split(",") if pattern.strip()]

    @property
    def uses_azure_openai(self) -> bool:
        return bool(self.azure_openai_endpoint and self.azure_openai_api_key)
