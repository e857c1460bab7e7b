"""API request models."""

from pydantic import BaseModel, Field, StrictStr, field_validator


class AnalyzeRequest(BaseModel):
    """Request model for policy analysis."""

    input: StrictStr = Field(
        ..., description="Privacy policy text or an http(s) URL to fetch it from"
    )

    @field_validator("input")
    @classmethod
    def input_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("input must not be empty")
        return value
