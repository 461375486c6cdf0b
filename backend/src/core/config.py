"""
Configuration Management
Pydantic Settings with strict validation
"""
from typing import Optional, List
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with strict validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "ApplyGate"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(default="development")

    # OpenRouter LLM (application message + screening answers)
    OPENROUTER_API_KEY: Optional[str] = Field(
        default=None,
        description="OpenRouter API key for LLM-powered drafting"
    )
    AI_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    AI_MODEL: str = "gpt-4o-mini"
    AI_TIMEOUT_SECONDS: float = 30.0
    AI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS: int = 1500

    # Pacing (milliseconds)
    MIN_ACTION_DELAY_MS: int = 1500
    MAX_ACTION_DELAY_MS: int = 4000
    HESITATION_PROBABILITY: float = 0.15
    HESITATION_MIN_MS: int = 500
    HESITATION_MAX_MS: int = 1500
    KEYSTROKE_DELAY_MIN_MS: int = 30
    KEYSTROKE_DELAY_MAX_MS: int = 100

    # Form traversal
    MAX_FORM_PAGES: int = 10
    MIN_LABEL_LENGTH: int = 3
    FORM_RENDER_TIMEOUT_MS: int = 5000
    SUBMIT_CONFIRMATION_WAIT_MS: int = 2500
    NAVIGATION_TIMEOUT_MS: int = 30000

    # Audit
    AUDIT_LOG_DIR: str = "./logs/applications"

    # Platforms
    LINKEDIN_BASE_URL: str = "https://www.linkedin.com"
    UPWORK_BASE_URL: str = "https://www.upwork.com"

    # Playwright
    PLAYWRIGHT_HEADLESS: bool = False
    BROWSER_USER_DATA_DIR: str = "./browser-data"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON_FORMAT: bool = False
    LOG_DIR: str = "logs"

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("HESITATION_PROBABILITY")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        """Probability must lie in [0, 1]"""
        if not 0.0 <= v <= 1.0:
            raise ValueError("HESITATION_PROBABILITY must be between 0 and 1")
        return v

    @field_validator("MAX_FORM_PAGES", "MIN_LABEL_LENGTH")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_ranges(self) -> "Settings":
        """Every min/max delay pair must be ordered"""
        pairs = [
            ("MIN_ACTION_DELAY_MS", "MAX_ACTION_DELAY_MS"),
            ("HESITATION_MIN_MS", "HESITATION_MAX_MS"),
            ("KEYSTROKE_DELAY_MIN_MS", "KEYSTROKE_DELAY_MAX_MS"),
        ]
        for low_name, high_name in pairs:
            low, high = getattr(self, low_name), getattr(self, high_name)
            if low < 0 or low > high:
                raise ValueError(f"{low_name} ({low}) must be >= 0 and <= {high_name} ({high})")
        return self


# Global settings instance
settings = Settings()
