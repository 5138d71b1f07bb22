import logging
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    llm_base_url: str = Field("https://api.openai.com/v1", alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(None, alias="LLM_API_KEY")
    llm_model_name: str = Field("gpt-4o-mini", alias="LLM_MODEL_NAME")
    llm_timeout_seconds: float = Field(90.0, alias="LLM_TIMEOUT_SECONDS")
    youtube_api_key: str | None = Field(None, alias="YOUTUBE_API_KEY")
    transcript_languages: List[str] = Field(default_factory=lambda: ["en"], alias="TRANSCRIPT_LANGUAGES")
    scraper_user_agent: str = Field(
        "Mozilla/5.0 (compatible; MealmanBot/1.0)",
        alias="SCRAPER_USER_AGENT",
    )
    # Applies to plain HTTP fetches and to each headless render.
    fetch_timeout_seconds: float = Field(30.0, alias="FETCH_TIMEOUT_SECONDS")
    browser_headless: bool = Field(True, alias="BROWSER_HEADLESS")
    body_text_max_chars: int = Field(10_000, alias="BODY_TEXT_MAX_CHARS")
    detection_excerpt_chars: int = Field(3_000, alias="DETECTION_EXCERPT_CHARS")
    extract_requires_detection: bool = Field(True, alias="EXTRACT_REQUIRES_DETECTION")
    cors_allowed_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOWED_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
