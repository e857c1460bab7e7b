"""Remote analysis provider backed by the OpenAI Assistants API."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from openai import OpenAI

from policyscope.config import Settings
from policyscope.logger import get_logger

logger = get_logger(__name__)


class JobStatus(str, Enum):
    """Run status reported by the provider."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    INCOMPLETE = "incomplete"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "JobStatus":
        """Parse a raw status string; unrecognized values become UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def succeeded(self) -> bool:
        return self is JobStatus.COMPLETED

    @property
    def failed(self) -> bool:
        return self in _FAILED_STATUSES

    @property
    def terminal(self) -> bool:
        return self.succeeded or self.failed

    @property
    def label(self) -> str:
        """Human-readable progress message."""
        return _STATUS_LABELS[self]


_FAILED_STATUSES = frozenset(
    {JobStatus.FAILED, JobStatus.CANCELLED, JobStatus.EXPIRED, JobStatus.INCOMPLETE}
)

_STATUS_LABELS = {
    JobStatus.QUEUED: "Queued...",
    JobStatus.IN_PROGRESS: "Analyzing...",
    JobStatus.REQUIRES_ACTION: "Waiting on the assistant...",
    JobStatus.CANCELLING: "Cancelling...",
    JobStatus.COMPLETED: "Analysis complete",
    JobStatus.FAILED: "Analysis failed",
    JobStatus.CANCELLED: "Analysis cancelled",
    JobStatus.EXPIRED: "Analysis expired",
    JobStatus.INCOMPLETE: "Analysis incomplete",
    JobStatus.UNKNOWN: "Waiting...",
}


@dataclass
class JobState:
    """Snapshot of a provider run."""

    status: JobStatus
    error: Optional[str] = None


@dataclass
class ProviderMessage:
    """A message in a provider conversation; text is None for non-text content."""

    role: str
    text: Optional[str]


class AnalysisProvider(Protocol):
    """Conversation/job operations the analyzer needs from a hosted assistant."""

    def create_session(self) -> str: ...

    def post_message(self, session_id: str, role: str, text: str) -> None: ...

    def start_job(self, session_id: str, template_id: str) -> str: ...

    def get_job_status(self, session_id: str, job_id: str) -> JobState: ...

    def latest_message(self, session_id: str) -> Optional[ProviderMessage]: ...


class OpenAIAssistantProvider:
    """Threads, messages and runs of the OpenAI Assistants API."""

    def __init__(self, settings: Settings):
        self.client = OpenAI(api_key=settings.openai_api_key)
        logger.info("OpenAIAssistantProvider initialized")

    def create_session(self) -> str:
        thread = self.client.beta.threads.create()
        logger.debug(f"Created thread {thread.id}")
        return thread.id

    def post_message(self, session_id: str, role: str, text: str) -> None:
        self.client.beta.threads.messages.create(session_id, role=role, content=text)
        logger.debug(f"Posted {len(text)} chars to thread {session_id}")

    def start_job(self, session_id: str, template_id: str) -> str:
        run = self.client.beta.threads.runs.create(
            thread_id=session_id, assistant_id=template_id
        )
        logger.debug(f"Started run {run.id} on thread {session_id}")
        return run.id

    def get_job_status(self, session_id: str, job_id: str) -> JobState:
        run = self.client.beta.threads.runs.retrieve(job_id, thread_id=session_id)
        error = run.last_error.message if run.last_error else None
        return JobState(status=JobStatus.parse(run.status), error=error)

    def latest_message(self, session_id: str) -> Optional[ProviderMessage]:
        """Return the newest message in the thread, or None for an empty thread."""
        messages = self.client.beta.threads.messages.list(
            thread_id=session_id, order="desc", limit=1
        )
        if not messages.data:
            return None

        message = messages.data[0]
        text = None
        if message.content and message.content[0].type == "text":
            text = message.content[0].text.value
        return ProviderMessage(role=message.role, text=text)

    def close(self):
        """Close the HTTP client."""
        logger.debug("Closing OpenAI client")
        self.client.close()
