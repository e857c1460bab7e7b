"""Orchestrate policy analysis workflow for API."""

import time
from typing import Any, Dict, Iterator

from policyscope.config import Settings
from policyscope.logger import get_logger
from policyscope.models.analysis import AnalysisResult
from policyscope.services.content_fetcher import ContentFetcher, is_url
from policyscope.services.policy_analyzer import PolicyAnalyzer

logger = get_logger(__name__)


class AnalysisService:
    """Resolve the user's input to policy text and analyze it."""

    def __init__(
        self,
        settings: Settings,
        analyzer: PolicyAnalyzer | None = None,
        fetcher: ContentFetcher | None = None,
    ):
        self.settings = settings
        self.analyzer = analyzer or PolicyAnalyzer(settings)
        self.fetcher = fetcher or ContentFetcher(settings)
        logger.info("AnalysisService initialized")

    def resolve_text(self, user_input: str) -> str:
        """Fetch the page text for URL input, otherwise return the input itself."""
        user_input = user_input.strip()
        if is_url(user_input):
            return self.fetcher.fetch_text(user_input)
        return user_input

    def analyze(self, user_input: str) -> AnalysisResult:
        """Analyze a policy (synchronous)."""
        start_time = time.time()
        logger.info(f"Analyzing input: '{user_input[:50]}...'")
        self.analyzer.check_config()

        text = self.resolve_text(user_input)
        result = self.analyzer.analyze(text)

        logger.info(f"Analysis request complete in {time.time() - start_time:.2f}s")
        return result

    def analyze_stream(self, user_input: str) -> Iterator[Dict[str, Any]]:
        """Analyze a policy, yielding progress events ready for JSON encoding."""
        logger.info(f"Starting streaming analysis for: '{user_input[:50]}...'")
        self.analyzer.check_config()

        if is_url(user_input):
            yield {
                "type": "fetching",
                "data": {"url": user_input.strip(), "message": "Fetching policy..."},
            }
        text = self.resolve_text(user_input)

        for event in self.analyzer.iter_analysis(text):
            if event["type"] == "complete":
                result = event["data"]["result"]
                yield {"type": "complete", "data": result.model_dump(mode="json")}
            else:
                yield event

    def close(self):
        """Clean up resources."""
        self.fetcher.close()
        self.analyzer.close()
        logger.debug("AnalysisService resources closed")
