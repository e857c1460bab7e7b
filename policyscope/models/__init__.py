"""Data models for PolicyScope."""

from policyscope.models.analysis import (
    AnalysisResult,
    DataCollection,
    Risk,
    RiskLevel,
    UsagePurpose,
)

__all__ = [
    "AnalysisResult",
    "DataCollection",
    "Risk",
    "RiskLevel",
    "UsagePurpose",
]
