from pydantic import BaseModel, Field


class InlineComment(BaseModel):
    """Review comment anchored at a diff position of one file."""
    path: str
    position: int = Field(ge=1)
    body: str
