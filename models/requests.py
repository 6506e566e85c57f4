"""
Pydantic models for API requests
"""

from pydantic import BaseModel, Field, field_validator


class PromptRequest(BaseModel):
    """Request model for /api/parse and /api/run"""
    prompt: str = Field(
        ...,
        min_length=1,
        description="Natural-language description of the companies to find",
        examples=["AI startups in India with 50-200 employees, Series A funding"]
    )

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be blank")
        return value
