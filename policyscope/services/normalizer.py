"""Normalize assistant JSON into the canonical AnalysisResult shape.

The assistant prompt has changed over time, so replies come in more than one
shape: sections under a "summary" key or at the top level, usage purposes as an
object or a flat list, sharing parties / user rights / protection strategy as
lists or keyed objects, and risks under "risks.privacy_risks", "privacy_risks"
or a flat "risks" list. All of them map onto one result.
"""

from typing import Any, Optional

from policyscope.errors import DataIntegrityError
from policyscope.logger import get_logger
from policyscope.models.analysis import (
    AnalysisResult,
    DataCollection,
    Risk,
    RiskLevel,
    UsagePurpose,
)

logger = get_logger(__name__)

USAGE_FIELDS = (
    "account_services",
    "content_services",
    "customer_service",
    "marketing",
    "transaction_services",
)

REQUIRED_COLLECTION_FIELDS = ("basic_info", "behavior_info", "device_info")
REQUIRED_LIST_FIELDS = ("sharing_parties", "user_rights", "protection_strategy", "risks")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return "; ".join(item for item in (_text(v) for v in value) if item)
    return str(value)


def _string_list(value: Any) -> list[str]:
    """Coerce a list, keyed object, or scalar into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, dict):
        items = value.values()
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]
    return [text for text in (_text(item) for item in items) if text]


def _section(raw: dict, key: str) -> Any:
    summary = raw.get("summary")
    if isinstance(summary, dict) and key in summary:
        return summary[key]
    return raw.get(key)


def _normalize_data_collection(value: Any) -> DataCollection:
    if not isinstance(value, dict):
        return DataCollection()
    return DataCollection(
        **{name: _string_list(value.get(name)) for name in DataCollection.model_fields}
    )


def _normalize_usage_purpose(value: Any) -> UsagePurpose:
    if isinstance(value, dict):
        fields = {name: _text(value.get(name)) for name in USAGE_FIELDS}
        return UsagePurpose(**fields, general=_string_list(value.get("general")))
    # Flat list variant: everything is an overflow purpose
    return UsagePurpose(general=_string_list(value))


def _risk_entries(raw: dict) -> list:
    risks = raw.get("risks")
    if isinstance(risks, dict):
        risks = risks.get("privacy_risks")
    if risks is None:
        risks = raw.get("privacy_risks")
    if risks is None:
        risks = _section(raw, "privacy_risks")
    if isinstance(risks, dict):
        risks = [risks]
    return risks if isinstance(risks, list) else []


def _normalize_risk(entry: Any) -> Optional[Risk]:
    if isinstance(entry, str):
        return Risk(description=entry.strip()) if entry.strip() else None
    if not isinstance(entry, dict):
        return None
    level = entry.get("risk_level") or entry.get("level")
    return Risk(
        level=RiskLevel.from_label(level),
        description=_text(entry.get("description")),
        reason=_text(entry.get("reason")),
    )


def normalize_result(raw: dict) -> AnalysisResult:
    """Build a fully defaulted AnalysisResult from parsed assistant JSON."""
    risks = [risk for risk in map(_normalize_risk, _risk_entries(raw)) if risk is not None]

    result = AnalysisResult(
        data_collection=_normalize_data_collection(_section(raw, "data_collection")),
        usage_purpose=_normalize_usage_purpose(_section(raw, "usage_purpose")),
        sharing_parties=_string_list(_section(raw, "sharing_parties")),
        user_rights=_string_list(_section(raw, "user_rights")),
        protection_strategy=_string_list(_section(raw, "protection_strategy")),
        risks=risks,
    )
    logger.debug(
        f"Normalized result: {len(result.risks)} risks, "
        f"{len(result.sharing_parties)} sharing parties"
    )
    return result


def validate_result(result: AnalysisResult) -> AnalysisResult:
    """Check every required field is structurally present.

    Raises:
        DataIntegrityError: If a required field is missing or of the wrong type.
    """
    missing = []

    collection = getattr(result, "data_collection", None)
    for name in REQUIRED_COLLECTION_FIELDS:
        if not isinstance(getattr(collection, name, None), list):
            missing.append(f"data_collection.{name}")

    usage = getattr(result, "usage_purpose", None)
    if not isinstance(usage, UsagePurpose):
        missing.append("usage_purpose")
    else:
        for name in USAGE_FIELDS:
            if not isinstance(getattr(usage, name, None), str):
                missing.append(f"usage_purpose.{name}")

    for name in REQUIRED_LIST_FIELDS:
        if not isinstance(getattr(result, name, None), list):
            missing.append(name)

    if missing:
        logger.error(f"Normalized result is missing fields: {missing}")
        raise DataIntegrityError(
            f"AI response data is incomplete, missing: {', '.join(missing)}"
        )
    return result
