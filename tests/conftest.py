import pytest

from policyscope.config import Settings
from policyscope.services.provider import JobState, JobStatus, ProviderMessage


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeProvider:
    """In-memory provider that replays a fixed status sequence."""

    def __init__(self, statuses=("completed",), reply="{}", role="assistant", error=None):
        self.statuses = list(statuses)
        self.reply = reply
        self.role = role
        self.error = error
        self.calls = []
        self.messages = []
        self.closed = False

    def create_session(self) -> str:
        self.calls.append("create_session")
        return "thread_1"

    def post_message(self, session_id, role, text):
        self.calls.append("post_message")
        self.messages.append((session_id, role, text))

    def start_job(self, session_id, template_id):
        self.calls.append("start_job")
        self.template_id = template_id
        return "run_1"

    def get_job_status(self, session_id, job_id):
        self.calls.append("get_job_status")
        # Keep reporting the last status once the sequence runs out
        raw = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return JobState(status=JobStatus.parse(raw), error=self.error)

    def latest_message(self, session_id):
        self.calls.append("latest_message")
        if self.reply is None:
            return None
        return ProviderMessage(role=self.role, text=self.reply)

    def close(self):
        self.closed = True

    @property
    def poll_count(self) -> int:
        return self.calls.count("get_job_status")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        openai_assistant_id="asst_test",
        poll_interval_seconds=1.0,
        max_wait_seconds=30.0,
    )


@pytest.fixture
def clock():
    return FakeClock()
