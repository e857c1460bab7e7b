"""API response models."""

from typing import Optional

from pydantic import BaseModel, Field

from policyscope.models.analysis import AnalysisResult


class AnalyzeResponse(BaseModel):
    """Envelope for every analyze response, successful or not."""

    success: bool = Field(..., description="Whether the analysis succeeded")
    data: Optional[AnalysisResult] = Field(default=None, description="Analysis result")
    message: Optional[str] = Field(default=None, description="Error message")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(default="0.1.0", description="API version")
