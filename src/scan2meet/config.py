"""Application settings loaded from the environment and ``.env``."""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LINKS_PATH = Path.home() / ".config" / "scan2meet" / "scheduling_links.json"


class Settings(BaseSettings):
    """Runtime configuration for extractors, research and links."""

    model_config = SettingsConfigDict(
        env_prefix="SCAN2MEET_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # API keys
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SCAN2MEET_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SCAN2MEET_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )

    # Models
    extractor_backend: str = "gemini"
    gemini_model: str = "gemini-2.0-flash"
    openai_model: str = "gpt-4o"
    research_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_base_url: str = "https://api.openai.com/v1"
    request_timeout: float = 60.0

    # Capture
    auto_crop: bool = True
    max_image_dim: int = 1600

    # Scheduling links
    links_path: Path = DEFAULT_LINKS_PATH
    query_param_last_name: str = "lastName"
    query_param_first_name: str = "firstName"
    query_param_full_name: str = "fullName"
    query_param_department: str = "department"
    query_param_company: str = "company"
    query_param_email: str = "email"
    query_param_phone: str = "phone"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
