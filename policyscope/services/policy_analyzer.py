"""Privacy policy analyzer driving one assistant run per request."""

import time
from typing import Any, Callable, Dict, Iterator, Optional

from policyscope.config import Settings
from policyscope.errors import (
    AnalysisFailedError,
    AnalysisTimeoutError,
    ConfigurationError,
    ResponseFormatError,
)
from policyscope.logger import get_logger
from policyscope.models.analysis import AnalysisResult
from policyscope.services.json_extraction import extract_json
from policyscope.services.normalizer import normalize_result, validate_result
from policyscope.services.provider import (
    AnalysisProvider,
    JobStatus,
    OpenAIAssistantProvider,
)

logger = get_logger(__name__)


ANALYSIS_PROMPT = """Analyze the following privacy policy and return the result as a single JSON object.

Privacy policy:

{text}

Return only JSON in exactly this format:
{{
  "summary": {{
    "data_collection": {{
      "basic_info": [],
      "behavior_info": [],
      "device_info": [],
      "third_party_login": [],
      "account_info": [],
      "real_name_authentication": [],
      "content_interaction": []
    }},
    "usage_purpose": {{
      "account_services": "",
      "content_services": "",
      "customer_service": "",
      "marketing": "",
      "transaction_services": "",
      "general": []
    }},
    "sharing_parties": [],
    "user_rights": [],
    "protection_strategy": []
  }},
  "risks": {{
    "privacy_risks": [
      {{
        "risk_level": "high/medium/low",
        "description": "",
        "reason": ""
      }}
    ]
  }}
}}

"risk_level" must be one of "high", "medium" or "low"."""


def build_prompt(text: str, wrap: bool = True) -> str:
    """Wrap policy text in the JSON schema instruction."""
    if not wrap:
        return text
    return ANALYSIS_PROMPT.format(text=text)


class PolicyAnalyzer:
    """Submit a policy to the assistant, wait for the run, and normalize its reply."""

    def __init__(
        self,
        settings: Settings,
        provider: Optional[AnalysisProvider] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.provider = provider
        self._owns_provider = False
        self.sleep = sleep
        self.clock = clock

    def check_config(self):
        """Raise ConfigurationError unless the API key and assistant id are set."""
        missing = []
        if not self.settings.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.settings.openai_assistant_id:
            missing.append("OPENAI_ASSISTANT_ID")
        if missing:
            logger.error(f"Missing configuration: {', '.join(missing)}")
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

    def _get_provider(self) -> AnalysisProvider:
        if self.provider is None:
            self.provider = OpenAIAssistantProvider(self.settings)
            self._owns_provider = True
        return self.provider

    def close(self):
        """Close the provider client if this analyzer created it."""
        if self._owns_provider:
            self.provider.close()
            self.provider = None
            self._owns_provider = False
            logger.debug("PolicyAnalyzer provider closed")

    def _wait_for_run(
        self, provider: AnalysisProvider, session_id: str, job_id: str
    ) -> Iterator[Dict[str, Any]]:
        """Poll the run until it succeeds, yielding an event per status change."""
        deadline = self.clock() + self.settings.max_wait_seconds
        last_status = None

        while True:
            state = provider.get_job_status(session_id, job_id)
            status = state.status

            if status is not last_status:
                logger.info(f"Run {job_id} status: {status.value}")
                yield {
                    "type": "status",
                    "data": {"status": status.value, "message": status.label},
                }
                last_status = status

            if status.succeeded:
                return
            if status.failed:
                detail = f": {state.error}" if state.error else ""
                logger.error(f"Run {job_id} ended with status {status.value}{detail}")
                raise AnalysisFailedError(
                    status.value, f"Analysis {status.value}{detail}"
                )

            if self.clock() + self.settings.poll_interval_seconds > deadline:
                logger.error(
                    f"Run {job_id} still {status.value} after {self.settings.max_wait_seconds}s"
                )
                raise AnalysisTimeoutError(
                    f"Analysis timed out after {self.settings.max_wait_seconds:g} seconds"
                )
            self.sleep(self.settings.poll_interval_seconds)

    def _reply_text(self, provider: AnalysisProvider, session_id: str) -> str:
        message = provider.latest_message(session_id)
        if message is None or message.role != "assistant" or not message.text:
            logger.error(f"Unexpected final message in thread {session_id}: {message}")
            raise ResponseFormatError("AI response is missing or not a text reply")
        logger.debug(f"AI response text: {message.text}")
        return message.text

    def iter_analysis(self, text: str) -> Iterator[Dict[str, Any]]:
        """Run one analysis, yielding progress events.

        The last event has type "complete" and carries the validated
        AnalysisResult under data["result"].

        Raises:
            ConfigurationError: API key or assistant id not set.
            AnalysisFailedError: The run failed, was cancelled or expired.
            AnalysisTimeoutError: The run did not finish in time.
            ResponseFormatError: The reply had no extractable JSON.
            DataIntegrityError: The normalized result is incomplete.
        """
        self.check_config()
        provider = self._get_provider()

        logger.info("=== Starting Policy Analysis ===")
        logger.info(f"Policy length: {len(text)} chars")
        start_time = self.clock()

        session_id = provider.create_session()
        provider.post_message(
            session_id, "user", build_prompt(text, self.settings.wrap_prompt)
        )
        job_id = provider.start_job(session_id, self.settings.openai_assistant_id)
        logger.info(f"Started run {job_id} on thread {session_id}")
        yield {"type": "started", "data": {"session_id": session_id, "job_id": job_id}}

        yield from self._wait_for_run(provider, session_id, job_id)

        raw = extract_json(self._reply_text(provider, session_id))
        result = validate_result(normalize_result(raw))

        elapsed = self.clock() - start_time
        logger.info(f"Analysis complete in {elapsed:.2f}s: {len(result.risks)} risks")
        yield {"type": "complete", "data": {"result": result}}

    def analyze(self, text: str) -> AnalysisResult:
        """Run one analysis and return the normalized result."""
        result = None
        for event in self.iter_analysis(text):
            if event["type"] == "complete":
                result = event["data"]["result"]
        return result
