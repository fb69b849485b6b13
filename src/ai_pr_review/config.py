from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_pr_review.errors import ConfigurationError
from ai_pr_review.models.config import ReviewMode
from ai_pr_review.review.engine import DEFAULT_COMMENT_MARKER, ReviewOptions
from ai_pr_review.review.utils import clamp_int


# field -> (default, min, max)
NUMERIC_BOUNDS: dict[str, tuple[int, int, int]] = {
    "max_files": (25, 1, 200),
    "max_chars": (120_000, 10_000, 500_000),
    "max_file_chars": (20_000, 1_000, 200_000),
    "chunk_size": (12_000, 1_000, 50_000),
    "timeout_ms": (120_000, 5_000, 600_000),
    "max_tokens": (1_500, 50, 8_000),
    "max_retries": (3, 1, 10),
    "retry_base_delay_ms": (1_000, 100, 10_000),
}


class Settings(BaseSettings):
    """Action inputs arrive as INPUT_<NAME>; runner variables keep their own names."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="INPUT_",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Generation endpoint
    base_url: str | None = None
    api_key: str | None = None
    model: str | None = None
    temperature: float = 0.2

    # Review behaviour
    language: str = "English"
    review_mode: ReviewMode = ReviewMode.SUMMARY
    max_files: int = 25
    max_chars: int = 120_000
    max_file_chars: int = 20_000
    chunk_size: int = 12_000
    timeout_ms: int = 120_000
    max_tokens: int = 1_500
    max_retries: int = 3
    retry_base_delay_ms: int = 1_000
    fail_on_issues: bool = False
    extra_instructions: str = ""
    comment_marker: str = DEFAULT_COMMENT_MARKER
    reviewer_name: str = "AI PR Review"

    # GitHub
    github_token: str | None = Field(default=None, validation_alias=AliasChoices("github_token", "input_github_token"))
    github_repository: str | None = Field(default=None, validation_alias=AliasChoices("github_repository"))
    github_event_path: str | None = Field(default=None, validation_alias=AliasChoices("github_event_path"))
    github_api_url: str = Field(default="https://api.github.com", validation_alias=AliasChoices("github_api_url"))
    github_webhook_secret: str | None = Field(default=None, validation_alias=AliasChoices("github_webhook_secret"))

    log_level: str = Field(default="INFO", validation_alias=AliasChoices("log_level", "input_log_level"))

    @field_validator(*NUMERIC_BOUNDS, mode="before")
    @classmethod
    def clamp_numeric(cls, value, info):
        default, minimum, maximum = NUMERIC_BOUNDS[info.field_name]
        return clamp_int(value, default, minimum, maximum)

    @field_validator("review_mode", mode="before")
    @classmethod
    def parse_review_mode(cls, value):
        if isinstance(value, ReviewMode):
            return value
        value = str(value or "").strip().lower()
        return ReviewMode(value) if value in {m.value for m in ReviewMode} else ReviewMode.SUMMARY

    @field_validator("fail_on_issues", mode="before")
    @classmethod
    def parse_flag(cls, value):
        if isinstance(value, bool):
            return value
        return str(value or "false").strip().lower() == "true"

    @field_validator("base_url", mode="before")
    @classmethod
    def strip_base_url(cls, value):
        if isinstance(value, str):
            return value.strip().rstrip("/") or None
        return value

    def require_generation(self) -> None:
        """Raise ConfigurationError unless the generation endpoint is configured."""
        missing = [name for name in ("base_url", "api_key", "model") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    def require_github(self) -> None:
        if not self.github_token:
            raise ConfigurationError("GITHUB_TOKEN is required")

    def review_options(self) -> ReviewOptions:
        return ReviewOptions(
            review_mode=self.review_mode,
            language=self.language,
            max_files=self.max_files,
            max_chars=self.max_chars,
            max_file_chars=self.max_file_chars,
            chunk_size=self.chunk_size,
            fail_on_issues=self.fail_on_issues,
            extra_instructions=self.extra_instructions,
            comment_marker=self.comment_marker,
            reviewer_name=self.reviewer_name,
        )
