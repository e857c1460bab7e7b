"""Privacy policy analysis data models."""

from enum import Enum

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """Three-point severity scale, plus a placeholder for unlabeled risks."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: object) -> "RiskLevel":
        """Map an English or Chinese label ("High", "high risk", "高", "高风险") to a level."""
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            return cls.UNKNOWN

        value = label.strip().lower()
        for suffix in ("风险", " risk", "-risk", "risk"):
            if value.endswith(suffix):
                value = value[: -len(suffix)].strip()
                break

        return _LEVEL_LABELS.get(value, cls.UNKNOWN)


_LEVEL_LABELS = {
    "high": RiskLevel.HIGH,
    "高": RiskLevel.HIGH,
    "medium": RiskLevel.MEDIUM,
    "moderate": RiskLevel.MEDIUM,
    "中": RiskLevel.MEDIUM,
    "low": RiskLevel.LOW,
    "低": RiskLevel.LOW,
}


class Risk(BaseModel):
    """A single privacy risk flagged in the policy."""

    level: RiskLevel = Field(default=RiskLevel.UNKNOWN, description="Severity of the risk")
    description: str = Field(default="", description="What the risk is")
    reason: str = Field(default="", description="Why the policy text implies it")


class DataCollection(BaseModel):
    """Personal data categories the policy says are collected."""

    basic_info: list[str] = Field(default_factory=list)
    behavior_info: list[str] = Field(default_factory=list)
    device_info: list[str] = Field(default_factory=list)
    third_party_login: list[str] = Field(default_factory=list)
    account_info: list[str] = Field(default_factory=list)
    real_name_authentication: list[str] = Field(default_factory=list)
    content_interaction: list[str] = Field(default_factory=list)


class UsagePurpose(BaseModel):
    """What the collected data is used for."""

    account_services: str = ""
    content_services: str = ""
    customer_service: str = ""
    marketing: str = ""
    transaction_services: str = ""
    general: list[str] = Field(default_factory=list, description="Purposes outside the fixed categories")


class AnalysisResult(BaseModel):
    """Canonical, fully defaulted analysis of one privacy policy."""

    data_collection: DataCollection = Field(default_factory=DataCollection)
    usage_purpose: UsagePurpose = Field(default_factory=UsagePurpose)
    sharing_parties: list[str] = Field(default_factory=list)
    user_rights: list[str] = Field(default_factory=list)
    protection_strategy: list[str] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
