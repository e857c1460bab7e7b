import json

import pytest

from conftest import FakeProvider
from policyscope.config import Settings
from policyscope.errors import (
    AnalysisFailedError,
    AnalysisTimeoutError,
    ConfigurationError,
    DataIntegrityError,
    ResponseFormatError,
)
from policyscope.models.analysis import RiskLevel
from policyscope.services import policy_analyzer
from policyscope.services.policy_analyzer import PolicyAnalyzer, build_prompt

REPLY = {
    "summary": {
        "data_collection": {"basic_info": ["email", "phone number"]},
        "usage_purpose": {"marketing": "Targeted ads"},
        "sharing_parties": ["advertisers"],
        "user_rights": ["access"],
        "protection_strategy": ["encryption"],
    },
    "risks": {
        "privacy_risks": [
            {"risk_level": "high", "description": "Sells data", "reason": "Section 5"}
        ]
    },
}


def make_analyzer(settings, clock, provider):
    return PolicyAnalyzer(settings, provider=provider, sleep=clock.sleep, clock=clock)


def test_successful_cycle(settings, clock):
    provider = FakeProvider(
        statuses=["queued", "in_progress", "in_progress", "completed"],
        reply=json.dumps(REPLY),
    )

    result = make_analyzer(settings, clock, provider).analyze("We collect your email.")

    assert result.data_collection.basic_info == ["email", "phone number"]
    assert result.usage_purpose.marketing == "Targeted ads"
    assert result.risks[0].level is RiskLevel.HIGH
    assert provider.calls[:3] == ["create_session", "post_message", "start_job"]
    assert provider.calls[-1] == "latest_message"
    assert provider.poll_count == 4
    assert provider.template_id == "asst_test"
    assert clock.sleeps == [1.0, 1.0, 1.0]


def test_message_is_wrapped_in_schema_prompt(settings, clock):
    provider = FakeProvider(reply=json.dumps(REPLY))

    make_analyzer(settings, clock, provider).analyze("POLICY TEXT")

    session_id, role, text = provider.messages[0]
    assert role == "user"
    assert "POLICY TEXT" in text
    assert '"privacy_risks"' in text
    assert "high" in text and "medium" in text and "low" in text


def test_unwrapped_prompt_sends_raw_text(settings, clock):
    settings.wrap_prompt = False
    provider = FakeProvider(reply=json.dumps(REPLY))

    make_analyzer(settings, clock, provider).analyze("POLICY TEXT")

    assert provider.messages[0][2] == "POLICY TEXT"
    assert build_prompt("x", wrap=False) == "x"


def test_fenced_reply_is_extracted(settings, clock):
    provider = FakeProvider(reply=f"```json\n{json.dumps(REPLY)}\n```")

    result = make_analyzer(settings, clock, provider).analyze("text")

    assert result.sharing_parties == ["advertisers"]


@pytest.mark.parametrize("status", ["failed", "cancelled", "expired"])
def test_terminal_failure_stops_before_extraction(settings, clock, status):
    provider = FakeProvider(statuses=["queued", status], reply=json.dumps(REPLY))

    with pytest.raises(AnalysisFailedError, match=status) as excinfo:
        make_analyzer(settings, clock, provider).analyze("text")

    assert excinfo.value.status == status
    assert "latest_message" not in provider.calls


def test_failure_includes_provider_error(settings, clock):
    provider = FakeProvider(statuses=["failed"], error="rate_limit_exceeded")

    with pytest.raises(AnalysisFailedError, match="rate_limit_exceeded"):
        make_analyzer(settings, clock, provider).analyze("text")


def test_unknown_status_keeps_polling(settings, clock):
    provider = FakeProvider(
        statuses=["something_new", "requires_action", "completed"],
        reply=json.dumps(REPLY),
    )

    make_analyzer(settings, clock, provider).analyze("text")

    assert provider.poll_count == 3


def test_timeout_stops_polling(settings, clock):
    settings.max_wait_seconds = 5.0
    provider = FakeProvider(statuses=["in_progress"])

    with pytest.raises(AnalysisTimeoutError):
        make_analyzer(settings, clock, provider).analyze("text")

    polls = provider.poll_count
    assert polls == 6
    assert clock.now <= settings.max_wait_seconds
    assert "latest_message" not in provider.calls


@pytest.mark.parametrize(
    "overrides, missing",
    [
        ({"openai_api_key": None}, "OPENAI_API_KEY"),
        ({"openai_assistant_id": None}, "OPENAI_ASSISTANT_ID"),
        ({"openai_api_key": "", "openai_assistant_id": ""}, "OPENAI_API_KEY"),
    ],
)
def test_missing_configuration_makes_no_calls(clock, overrides, missing):
    values = {"openai_api_key": "sk-test", "openai_assistant_id": "asst_test"}
    values.update(overrides)
    settings = Settings(_env_file=None, **values)
    provider = FakeProvider()

    with pytest.raises(ConfigurationError, match=missing):
        make_analyzer(settings, clock, provider).analyze("text")

    assert provider.calls == []


def test_missing_configuration_never_builds_client(clock, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("provider should not be constructed")

    monkeypatch.setattr(policy_analyzer, "OpenAIAssistantProvider", fail)
    settings = Settings(_env_file=None, openai_api_key=None, openai_assistant_id=None)

    with pytest.raises(ConfigurationError):
        PolicyAnalyzer(settings).analyze("text")


def test_non_json_reply_raises_format_error(settings, clock):
    provider = FakeProvider(reply="Sorry, I can't help with that.")

    with pytest.raises(ResponseFormatError):
        make_analyzer(settings, clock, provider).analyze("text")


@pytest.mark.parametrize("reply, role", [(None, "assistant"), ("{}", "user"), ("", "assistant")])
def test_missing_assistant_reply_raises_format_error(settings, clock, reply, role):
    provider = FakeProvider(reply=reply, role=role)

    with pytest.raises(ResponseFormatError):
        make_analyzer(settings, clock, provider).analyze("text")


def test_integrity_check_runs_after_normalization(settings, clock, monkeypatch):
    from policyscope.models.analysis import AnalysisResult

    monkeypatch.setattr(
        policy_analyzer,
        "normalize_result",
        lambda raw: AnalysisResult.model_construct(risks=None),
    )
    provider = FakeProvider(reply=json.dumps(REPLY))

    with pytest.raises(DataIntegrityError):
        make_analyzer(settings, clock, provider).analyze("text")


def test_iter_analysis_reports_status_changes(settings, clock):
    provider = FakeProvider(
        statuses=["queued", "queued", "in_progress", "completed"],
        reply=json.dumps(REPLY),
    )

    events = list(make_analyzer(settings, clock, provider).iter_analysis("text"))

    assert [e["type"] for e in events] == ["started", "status", "status", "status", "complete"]
    assert [e["data"]["status"] for e in events if e["type"] == "status"] == [
        "queued",
        "in_progress",
        "completed",
    ]
    assert events[-1]["data"]["result"].risks[0].description == "Sells data"


def test_close_releases_a_provider_it_created(settings, monkeypatch):
    created = []

    def build_provider(s):
        created.append(FakeProvider())
        return created[-1]

    monkeypatch.setattr(policy_analyzer, "OpenAIAssistantProvider", build_provider)
    analyzer = PolicyAnalyzer(settings)

    analyzer._get_provider()
    analyzer.close()
    analyzer.close()

    assert created[0].closed
    assert analyzer.provider is None


def test_close_leaves_an_injected_provider_open(settings, clock):
    provider = FakeProvider(reply=json.dumps(REPLY))
    analyzer = make_analyzer(settings, clock, provider)

    analyzer.analyze("text")
    analyzer.close()

    assert not provider.closed
    assert analyzer.provider is provider
