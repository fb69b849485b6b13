from enum import Enum
from pydantic import BaseModel, Field, field_validator


class ReviewMode(str, Enum):
    SUMMARY = "summary"
    INLINE = "inline"


class RepoConfig(BaseModel):
    """Optional per-repository overrides read from ``.ai-review.yaml``."""
    language: str | None = None
    review_mode: ReviewMode | None = None
    extra_instructions: str | None = None
    exclude: list[str] = Field(default_factory=list)

    @field_validator("review_mode", mode="before")
    @classmethod
    def normalize_mode(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in {m.value for m in ReviewMode}:
                return None
        return value
