"""Services for PolicyScope."""

from policyscope.services.content_fetcher import ContentFetcher
from policyscope.services.policy_analyzer import PolicyAnalyzer
from policyscope.services.provider import OpenAIAssistantProvider

__all__ = [
    "ContentFetcher",
    "PolicyAnalyzer",
    "OpenAIAssistantProvider",
]
